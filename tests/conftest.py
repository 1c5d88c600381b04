"""In-memory stand-ins for the parts of the Endstone API the plugin touches."""
from __future__ import annotations

import copy
import uuid
from types import SimpleNamespace
from typing import Any

import pytest

from endstone_repairitem.utils.command_util import load_all_target, load_function_aliases
from endstone_repairitem.utils.config_util import DEFAULT_CONFIG
from endstone_repairitem.utils.durability_util import MetaDurability
from endstone_repairitem.utils.logging_util import RepairMetrics
from endstone_repairitem.utils.messenger_util import Messenger
from endstone_repairitem.utils.repair_util import Repairer


class FakeItemType:
    def __init__(self, key: str, max_durability: int = 0):
        self.key = key
        self.max_durability = max_durability

    def __str__(self):
        return self.key


class FakeItemMeta:
    def __init__(self, damage=0, display_name=None, lore=None, enchants=None, item_flags=None, is_unbreakable=False):
        self.damage = damage
        self.display_name = display_name
        self.lore = lore
        self.enchants = enchants or {}
        self.item_flags = item_flags
        self.is_unbreakable = is_unbreakable

    @property
    def has_display_name(self):
        return self.display_name is not None

    @property
    def has_lore(self):
        return bool(self.lore)

    @property
    def has_enchants(self):
        return bool(self.enchants)

    @property
    def has_damage(self):
        return self.damage > 0


class FakeItemStack:
    """Like Endstone, item_meta hands out a copy that must be written back with set_item_meta."""

    def __init__(self, key: str, max_durability: int = 0, meta: FakeItemMeta | None = None, data: int = 0):
        self.type = FakeItemType(key, max_durability)
        self._meta = meta
        self.data = data
        self.amount = 1

    @property
    def item_meta(self):
        return copy.deepcopy(self._meta)

    def set_item_meta(self, meta):
        self._meta = copy.deepcopy(meta)

    @property
    def damage(self):
        return self._meta.damage if self._meta is not None else 0


def make_item(key: str, damage: int = 0, max_durability: int = 250, **meta) -> FakeItemStack:
    if ":" not in key:
        key = f"minecraft:{key}"
    return FakeItemStack(key, max_durability, FakeItemMeta(damage=damage, **meta))


def _armor_property(piece: str):
    def getter(self):
        return copy.deepcopy(self._armor.get(piece))

    def setter(self, item):
        self._armor[piece] = copy.deepcopy(item)

    return property(getter, setter)


class FakeInventory:
    """Like Endstone, every getter returns a copy of the stored item."""

    size = 36

    def __init__(self, held_item_slot: int = 0):
        self._slots: list[Any] = [None] * self.size
        self._armor: dict[str, Any] = {}
        self._off_hand = None
        self.held_item_slot = held_item_slot
        self.writes = 0

    helmet = _armor_property("helmet")
    chestplate = _armor_property("chestplate")
    leggings = _armor_property("leggings")
    boots = _armor_property("boots")

    def get_item(self, index: int):
        return copy.deepcopy(self._slots[index])

    def set_item(self, index: int, item):
        self.writes += 1
        self._slots[index] = copy.deepcopy(item)

    @property
    def item_in_main_hand(self):
        return self.get_item(self.held_item_slot)

    @property
    def item_in_off_hand(self):
        return copy.deepcopy(self._off_hand)

    @item_in_off_hand.setter
    def item_in_off_hand(self, item):
        self.writes += 1
        self._off_hand = copy.deepcopy(item)


class FakeSender:
    def __init__(self, name: str, permissions: set[str] | None = None, op: bool = False):
        self.name = name
        self.permissions = set(permissions or ())
        self.op = op
        self.messages: list[str] = []

    def send_message(self, message: str):
        self.messages.append(message)

    def has_permission(self, node: str) -> bool:
        return self.op or node in self.permissions

    def as_player(self):
        return None


class FakePlayer(FakeSender):
    def __init__(self, name: str, permissions: set[str] | None = None, op: bool = False,
                 location=(0.0, 0.0, 0.0), tags=None):
        super().__init__(name, permissions, op)
        self.unique_id = uuid.uuid4()
        self.inventory = FakeInventory()
        self.is_valid = True
        self.location = SimpleNamespace(x=location[0], y=location[1], z=location[2])
        self.scoreboard_tags = list(tags or [])

    def as_player(self):
        return self

    def __repr__(self):
        return f"FakePlayer({self.name!r})"


class FakeServer:
    def __init__(self, players=None):
        self.online_players = list(players or [])

    def get_player(self, name: str):
        # Case-insensitive, exact casing is up to the caller
        for player in self.online_players:
            if player.name.lower() == name.lower():
                return player
        return None


class FakePlugin:
    """Carries what the repair command handler reads off the plugin."""

    def __init__(self, server: FakeServer, settings: dict | None = None, off_hand_supported: bool = True):
        self.server = server
        self.settings = settings if settings is not None else copy.deepcopy(DEFAULT_CONFIG)
        self.repairer = Repairer(MetaDurability(), off_hand_supported)
        self.messenger = Messenger()
        self.metrics = RepairMetrics()
        self.reloads = 0
        self.apply_settings(self.settings)

    def apply_settings(self, settings: dict):
        self.settings = settings
        self.function_aliases = load_function_aliases(settings)
        self.all_target = load_all_target(settings)
        self.messenger.reload(settings)
        self.metrics.enabled = bool(settings.get("metrics", True))
        self.repairer.reload(settings.get("blocked_items"))

    def reload_config(self):
        self.reloads += 1
        self.apply_settings(self.settings)


@pytest.fixture
def settings() -> dict:
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def repairer() -> Repairer:
    return Repairer(MetaDurability(), off_hand_supported=True)


@pytest.fixture
def alice() -> FakePlayer:
    return FakePlayer("Alice")


@pytest.fixture
def bob() -> FakePlayer:
    return FakePlayer("Bob")


@pytest.fixture
def console() -> FakeSender:
    return FakeSender("Server", op=True)
