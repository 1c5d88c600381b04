import re
from typing import TYPE_CHECKING, Optional

from endstone_repairitem.utils.repair_result_util import RepairStatus

if TYPE_CHECKING:
    from endstone.command import CommandSender

COLOR_CODE_PATTERN = re.compile(r"&([0-9a-gk-or])", re.IGNORECASE)

# Message path of each status, relative to repair.<sender|target>
STATUS_PATHS = {
    RepairStatus.SUCCESS: "success.{function}",
    RepairStatus.NOT_REPAIRED: "fail.not_repaired",
    RepairStatus.UNSUPPORTED: "fail.unsupported",
    RepairStatus.UNKNOWN: "fail.unknown",
}

SCOPE_SENDER = "sender"
SCOPE_TARGET = "target"


def translate_color_codes(text: str) -> str:
    """Turns &-prefixed color codes into Minecraft section sign codes (&a -> §a)."""
    return COLOR_CODE_PATTERN.sub(lambda m: "§" + m.group(1).lower(), text)


def result_message_id(scope: str, status: RepairStatus, function: str) -> str:
    return f"repair.{scope}." + STATUS_PATHS[status].format(function=function)


def apply_placeholders(text: str, placeholders: Optional[dict]) -> str:
    if not placeholders:
        return text
    for key, value in placeholders.items():
        text = text.replace("{" + key + "}", str(value))
    return text


class Messenger:
    """Sends the configured messages, one line per entry, skipping players that have left."""

    def __init__(self, messages: Optional[dict] = None):
        self.messages = messages or {}

    def reload(self, config: dict):
        self.messages = config.get("messages", {})

    def get(self, message_id: str):
        node = self.messages
        for part in message_id.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get_string(self, message_id: str, default: str = "") -> str:
        value = self.get(message_id)
        return value if isinstance(value, str) else default

    def render(self, message_id: str, placeholders: Optional[dict] = None) -> list[str]:
        value = self.get(message_id)
        if value is None or isinstance(value, dict):
            return []

        lines = value if isinstance(value, list) else [value]
        return [
            translate_color_codes(apply_placeholders(str(line), placeholders))
            for line in lines if line is not None and str(line) != ""
        ]

    def send(self, recipient: "CommandSender", message_id: str, placeholders: Optional[dict] = None) -> bool:
        if not is_online(recipient):
            return False

        lines = self.render(message_id, placeholders)
        for line in lines:
            recipient.send_message(line)
        return bool(lines)


def is_online(recipient) -> bool:
    # Console and other non-player senders have no validity flag
    return getattr(recipient, "is_valid", True)
