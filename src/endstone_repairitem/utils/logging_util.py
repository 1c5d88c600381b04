import re
import threading
import time
from collections import Counter
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import requests

from endstone_repairitem.utils.permissions_util import NOTIFY_PERMISSION
from endstone_repairitem.utils.target_util import same_player

if TYPE_CHECKING:
    from endstone_repairitem.repairitem import RepairItem
    from endstone_repairitem.utils.repair_result_util import RepairResult


def log(self: "RepairItem", message: str, config: dict, exclude=None) -> bool:
    """Relays a repair notice to online staff other than exclude and, when enabled, to Discord."""
    logging = config.get("logging")
    if not isinstance(logging, dict):
        logging = {}

    if logging.get("notify_staff", True):
        for player in self.server.online_players:
            if player.has_permission(NOTIFY_PERMISSION) and not same_player(player, exclude):
                player.send_message(message)

    discord = logging.get("discord")
    if isinstance(discord, dict) and discord.get("enabled", False):
        return discordRelay(message, discord)

    return False


def discordRelay(message: str, discord_logging: dict) -> bool:
    """Send message to Discord asynchronously without blocking."""
    message = re.sub(r'§.', '', message)  # Clean up formatting

    webhook_url = discord_logging.get("webhook")
    if not webhook_url:
        return False

    embed = discord_logging.get("embed", {})
    payload = {
        "embeds": [
            {
                "title": embed.get("title", "RepairItem"),
                "description": message,
                "color": embed.get("color", 781919),
                "footer": {
                    "text": f"Logged at {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}"
                }
            }
        ]
    }

    threading.Thread(target=send_discord_message, args=(webhook_url, payload), daemon=True).start()
    return True


MAX_RETRIES = 15  # Max retries in case of rate limits
INITIAL_BACKOFF = 1  # Start with 1 second
def send_discord_message(webhook_url, payload):
    """Send HTTP request to Discord webhook with exponential backoff."""
    retries = 0
    backoff = INITIAL_BACKOFF

    while retries < MAX_RETRIES:
        response = None
        try:
            response = requests.post(webhook_url, json=payload, timeout=10)
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            # Check if rate limit (HTTP 429) occurred
            if response is not None and response.status_code == 429:
                retries += 1
                wait_time = backoff * (2 ** retries)  # Exponential backoff
                print(f"[RepairItem - Discord Log] Rate limit exceeded. Retrying in {wait_time}s...")
                time.sleep(wait_time)
            else:
                print(f"[RepairItem] Failed to send Discord message: {e}")
                return False

    print("[RepairItem] Max retries reached. Failed to send message.")
    return False


class RepairMetrics:
    """Usage counters kept for the session while metrics are enabled."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.invocations = Counter()
        self.repaired = Counter()
        self._lock = threading.Lock()

    def record(self, function: str, result: "RepairResult"):
        if not self.enabled:
            return
        with self._lock:
            self.invocations[function] += 1
            self.repaired[function] += result.repaired

    def summary(self) -> str:
        if not self.invocations:
            return "[RepairItem] No repairs this session."
        parts = [f"{function} x{count} ({self.repaired[function]} items)" for function, count in self.invocations.most_common()]
        return f"[RepairItem] Repairs this session: {', '.join(parts)}; {sum(self.repaired.values())} items in total."
