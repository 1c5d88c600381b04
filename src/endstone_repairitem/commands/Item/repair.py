from typing import TYPE_CHECKING

from endstone_repairitem.utils.command_util import META_FUNCTIONS, RepairFunction, create_command
from endstone_repairitem.utils.logging_util import log
from endstone_repairitem.utils.messenger_util import SCOPE_SENDER, SCOPE_TARGET, result_message_id
from endstone_repairitem.utils.permissions_util import (
    COMMAND_PERMISSION, SCOPE_OTHER, SCOPE_SELF, build_permissions, function_permission, has_permission
)
from endstone_repairitem.utils.repair_result_util import RepairResult, merge_all
from endstone_repairitem.utils.target_util import Target, TargetError, is_player, resolve_target, same_player

if TYPE_CHECKING:
    from endstone.command import CommandSender
    from endstone_repairitem.repairitem import RepairItem

# Register command
command, permission = create_command(
    "repair",
    "Repairs your items or the items of other players!",
    ["/repair [function: str] [target: str]"],
    [COMMAND_PERMISSION],
    "true",
    ["fix"],
    build_permissions()
)


# REPAIR COMMAND FUNCTIONALITY
def handler(self: "RepairItem", sender: "CommandSender", args: list[str]) -> bool:
    if len(args) == 0 or len(args) > 2:
        self.messenger.send(sender, "invalid_format")
        return True

    function = self.function_aliases.get(args[0].lower())
    if function is None:
        self.messenger.send(sender, "invalid_format")
        return True

    token = args[1] if len(args) == 2 else None

    if function in META_FUNCTIONS:
        if not check_permission(self, sender, function_permission(function)):
            return True
        if token is not None:
            self.messenger.send(sender, "invalid_format")
            return True

        if function is RepairFunction.RELOAD:
            self.reload_config()
            self.messenger.send(sender, "reload")
        else:
            self.messenger.send(sender, "help")
        return True

    scope = SCOPE_SELF if token is None else SCOPE_OTHER
    if not check_permission(self, sender, function_permission(function, scope)):
        return True

    try:
        target = resolve_target(self.server, sender, token, self.all_target)
    except TargetError as e:
        self.messenger.send(sender, e.message_id)
        return True

    run_repair(self, sender, function, target)
    return True


def check_permission(self: "RepairItem", sender: "CommandSender", node: str) -> bool:
    if has_permission(sender, node):
        return True
    self.messenger.send(sender, "no_permission")
    return False


def sender_placeholder(self: "RepairItem", sender: "CommandSender") -> str:
    if is_player(sender):
        return sender.name
    return self.messenger.get_string("repair.target.source_placeholder.console", sender.name)


def run_repair(self: "RepairItem", sender: "CommandSender", function: RepairFunction, target: Target) -> RepairResult:
    messenger = self.messenger
    target_name = target.replacement(
        sender,
        messenger.get_string("repair.sender.target_placeholder.self", "you"),
        messenger.get_string("repair.sender.target_placeholder.all", "all players")
    )
    sender_name = sender_placeholder(self, sender)

    if target.is_single:
        player = target.get_one()
        result = self.repairer.repair(player, function)

        messenger.send(sender, result_message_id(SCOPE_SENDER, result.status, function.value),
                       {"target": target_name, "sender": sender_name, "repaired": result.repaired})

        # Only one message when repairing your own items
        if not target.is_only(sender):
            messenger.send(player, result_message_id(SCOPE_TARGET, result.status, function.value),
                           {"target": player.name, "sender": sender_name, "repaired": result.repaired})
    else:
        results = []
        for player in target:
            local = self.repairer.repair(player, function)
            results.append(local)
            messenger.send(player, result_message_id(SCOPE_TARGET, local.status, function.value),
                           {"target": player.name, "sender": sender_name, "repaired": local.repaired})

        result = merge_all(results)
        messenger.send(sender, result_message_id(SCOPE_SENDER, result.status, function.value),
                       {"target": target_name, "sender": sender_name, "repaired": result.repaired})

    self.metrics.record(function.value, result)

    if any(not same_player(player, sender) for player in target):
        log(self, f"§e{sender_name} §6repaired §e{result.repaired} §6item(s) of §e{target_name} §8[§7{function.value}§8]", self.settings, sender)

    return result
