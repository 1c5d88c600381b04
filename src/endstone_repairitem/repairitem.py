import os
import traceback
from endstone.plugin import Plugin
from endstone.command import Command, CommandSender
from endstone.inventory import ItemMeta, ItemStack, PlayerInventory

from endstone_repairitem.commands import (
    preloaded_commands,
    preloaded_permissions,
    preloaded_handlers
)

from endstone_repairitem.utils.command_util import load_all_target, load_function_aliases
from endstone_repairitem.utils.config_util import load_config, preload_settings, set_config_folder
from endstone_repairitem.utils.durability_util import select_durability_accessor, supports_off_hand
from endstone_repairitem.utils.logging_util import RepairMetrics
from endstone_repairitem.utils.messenger_util import Messenger
from endstone_repairitem.utils.repair_util import Repairer


class RepairItem(Plugin):
    api_version = "0.9"
    authors = ["dejvokep"]
    name = "repairitem"
    description = "Repairs items in the inventory, armor, hotbar or hands of yourself and other players."

    commands = preloaded_commands
    permissions = preloaded_permissions
    handlers = preloaded_handlers

    def __init__(self):
        super().__init__()
        self.settings = {}
        self.function_aliases = {}
        self.all_target = frozenset()
        self.messenger = Messenger()
        self.metrics = RepairMetrics()
        self.repairer = None

    def on_load(self):
        print("[RepairItem] Thank you for downloading RepairItem!")

    def on_enable(self):
        set_config_folder(str(self.data_folder))
        self.settings = preload_settings()

        # Host capabilities are resolved once, not per repair
        accessor = select_durability_accessor(ItemMeta, ItemStack)
        self.repairer = Repairer(accessor, supports_off_hand(PlayerInventory))
        if accessor is not None:
            print(f"[RepairItem] Using {accessor.name} durability")

        self.apply_settings(self.settings)

    def on_disable(self):
        if self.metrics.enabled:
            print(self.metrics.summary())

    def reload_config(self):
        load_config(refresh=True)
        self.apply_settings(preload_settings())

    def apply_settings(self, settings: dict):
        self.settings = settings
        self.function_aliases = load_function_aliases(settings)
        self.all_target = load_all_target(settings)
        self.messenger.reload(settings)
        self.metrics.enabled = bool(settings.get("metrics", True))

        count = self.repairer.reload(settings.get("blocked_items"))
        print(f"[RepairItem] Loaded {count} blocked item(s)")

    def on_command(self, sender: CommandSender, command: Command, args: list[str]) -> bool:
        """Handle incoming commands dynamically"""
        try:
            if command.name in self.handlers:
                handler_func = self.handlers[command.name]
                return handler_func(self, sender, args)
            else:
                sender.send_message(f"Command '{command.name}' not found")
                return False

        except Exception as e:
            def clean_traceback(tb):
                cleaned_lines = []
                for line in tb.splitlines():
                    if 'File "' in line:
                        path_start = line.find('"') + 1
                        path_end = line.find('"', path_start)
                        file_path = line[path_start:path_end]
                        hidden_path = os.path.basename(file_path)
                        line = line.replace(file_path, f"<hidden>/{hidden_path}")
                    cleaned_lines.append(line)
                return "\n".join(cleaned_lines)

            error_message = (
                f"§c========\n"
                f"§6This command generated an error -> please report it and provide a copy of the error below!\n"
                f"§c========\n\n"
                f"§e{e}\n\n"
                f"§eCommand Usage: §b{command.name} + {args}\n\n"
                + f"§e{clean_traceback(traceback.format_exc())}\n"
                  f"§r"
            )
            error_message_console = (
                f"========\n"
                f"This command generated an error -> please report it and provide a copy of the error below!\n"
                f"========\n\n"
                f"{e}\n\n"
                f"Command Usage: {command.name} + {args}\n\n"
                + clean_traceback(traceback.format_exc())
            )

            sender.send_message(error_message)

            if sender.name != "Server":
                print(error_message_console)

            return False
