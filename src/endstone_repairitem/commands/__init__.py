import importlib
import pkgutil
import os

from collections import defaultdict

# Global storage for preloaded commands
preloaded_commands = {}
preloaded_permissions = {}
preloaded_handlers = {}


def preload_commands():
    """Preload all command modules before RepairItem is instantiated."""
    global preloaded_commands, preloaded_permissions, preloaded_handlers

    commands_base_path = os.path.dirname(os.path.abspath(__file__))
    grouped_commands = defaultdict(list)

    print("[RepairItem] Registering commands...")

    for root, _, _ in os.walk(commands_base_path):
        rel_path = os.path.relpath(root, commands_base_path)
        if "__pycache__" in rel_path:
            continue
        package_path = rel_path.replace(os.sep, ".") if rel_path != "." else ""

        for _, module_name, _ in pkgutil.iter_modules([root]):
            module_import_path = f"endstone_repairitem.commands{('.' + package_path) if package_path else ''}.{module_name}"
            module = importlib.import_module(module_import_path)

            if hasattr(module, 'command') and hasattr(module, 'handler'):
                for cmd, details in module.command.items():
                    preloaded_commands[cmd] = details
                    preloaded_handlers[cmd] = module.handler
                    grouped_commands[package_path].append((cmd, details.get('description', 'No description')))

                if hasattr(module, 'permission'):
                    for perm, details in module.permission.items():
                        preloaded_permissions[perm] = details

    # Print grouped commands
    for category, commands in grouped_commands.items():
        clean_category = category.replace("_", " ") if category else "Root"
        print(f"[{clean_category}]")
        for cmd, desc in commands:
            print(f"✓ {cmd} - {desc}")


# Run preload automatically when this file is imported
preload_commands()
print(f"[RepairItem] Loaded {len(preloaded_commands)} commands")

__all__ = ["preloaded_commands", "preloaded_permissions", "preloaded_handlers"]
