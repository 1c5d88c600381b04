from typing import TYPE_CHECKING

from endstone_repairitem.utils.command_util import META_FUNCTIONS, REPAIR_FUNCTIONS, RepairFunction, permission_name

if TYPE_CHECKING:
    from endstone.command import CommandSender

PERMISSION_BASE = "repairitem"
COMMAND_PERMISSION = f"{PERMISSION_BASE}.command.repair"
NOTIFY_PERMISSION = f"{PERMISSION_BASE}.notify"

SCOPE_SELF = "self"
SCOPE_OTHER = "other"


def function_permission(function: RepairFunction, scope: str = SCOPE_SELF) -> str:
    """repairitem.<function> for reload/help, repairitem.<function>.<self|other> for repairs."""
    if function in META_FUNCTIONS:
        return f"{PERMISSION_BASE}.{permission_name(function)}"
    return f"{PERMISSION_BASE}.{permission_name(function)}.{scope}"


def permission_chain(permission: str) -> list[str]:
    """The permission followed by its wildcard parents: a.b.c -> a.b.* -> a.*"""
    parts = permission.split(".")
    chain = [permission]
    for i in range(len(parts) - 1, 0, -1):
        chain.append(".".join(parts[:i]) + ".*")
    return chain


def has_permission(sender: "CommandSender", permission: str) -> bool:
    return any(sender.has_permission(node) for node in permission_chain(permission))


def build_permissions() -> dict:
    """Endstone permission declarations for every function node and the wildcards above them."""
    permissions = {}
    children_all = {}

    for function in REPAIR_FUNCTIONS:
        children = {}
        for scope in (SCOPE_SELF, SCOPE_OTHER):
            node = function_permission(function, scope)
            target = "your own" if scope == SCOPE_SELF else "other players'"
            permissions[node] = {
                "description": f"{function.value.replace('_', ' ').capitalize()} repair for {target} items",
                "default": "op"
            }
            children[node] = True
        wildcard = f"{PERMISSION_BASE}.{permission_name(function)}.*"
        permissions[wildcard] = {
            "description": f"All {function.value.replace('_', ' ')} repair permissions",
            "default": "op",
            "children": children
        }
        children_all[wildcard] = True

    permissions[function_permission(RepairFunction.RELOAD)] = {
        "description": "Reload the RepairItem configuration",
        "default": "op"
    }
    permissions[function_permission(RepairFunction.HELP)] = {
        "description": "Show the RepairItem help page",
        "default": "true"
    }
    permissions[NOTIFY_PERMISSION] = {
        "description": "Receive notifications about repairs done to other players",
        "default": "op"
    }

    children_all.update({
        function_permission(RepairFunction.RELOAD): True,
        function_permission(RepairFunction.HELP): True,
        NOTIFY_PERMISSION: True
    })
    permissions[f"{PERMISSION_BASE}.*"] = {
        "description": "Every RepairItem permission",
        "default": "op",
        "children": children_all
    }
    return permissions
