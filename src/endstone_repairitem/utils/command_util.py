from enum import Enum


class RepairFunction(Enum):
    ALL = "all"
    INVENTORY = "inventory"
    ARMOR = "armor"
    HOTBAR = "hotbar"
    BOTH_HANDS = "both_hands"
    MAIN_HAND = "main_hand"
    OFF_HAND = "off_hand"
    RELOAD = "reload"
    HELP = "help"


META_FUNCTIONS = frozenset({RepairFunction.RELOAD, RepairFunction.HELP})
REPAIR_FUNCTIONS = tuple(function for function in RepairFunction if function not in META_FUNCTIONS)


def permission_name(function: RepairFunction) -> str:
    return function.value.replace("_", "")


def create_command(command_name: str, description: str, usages: list, permissions: list, default: str = "op", aliases: list = None, extra_permissions: dict = None):
    # Create the command dictionary with all its details
    command = {
        command_name: {
            "description": description,
            "usages": usages,
            "permissions": permissions,
            "aliases": aliases if aliases else []
        }
    }

    # Endstone permission
    permission = {
        permissions[0]: {
            "description": f"Allows use of the {command_name} command",
            "default": default
        }
    }
    if extra_permissions:
        permission.update(extra_permissions)

    return command, permission


def load_function_aliases(config: dict) -> dict[str, RepairFunction]:
    """Maps every configured alias (lower-case) to its function. The function's own name always works."""
    configured = config.get("functions")
    if not isinstance(configured, dict):
        configured = {}
    aliases = {}
    for function in RepairFunction:
        aliases[function.value] = function
        for alias in as_list(configured.get(function.value)):
            alias = str(alias).strip().lower()
            if alias:
                aliases[alias] = function
    return aliases


def load_all_target(config: dict) -> frozenset[str]:
    return frozenset(str(alias).strip().lower() for alias in as_list(config.get("all_target")) if str(alias).strip())


def as_list(value) -> list:
    """A single configured string counts as a one-entry list; anything else that is not a list is ignored."""
    if isinstance(value, str):
        return [value]
    return value if isinstance(value, list) else []
