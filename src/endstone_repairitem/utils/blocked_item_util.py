from typing import TYPE_CHECKING, Any, Iterable, Optional

from endstone_repairitem.utils.messenger_util import translate_color_codes

if TYPE_CHECKING:
    from endstone.inventory import ItemStack

DEFAULT_NAMESPACE = "minecraft"
WILDCARD_LEVEL = "?"

PATH_TYPE = "type"
PATH_NAME = "name"
PATH_LORE = "lore"
PATH_ENCHANTMENTS = "enchantments"
PATH_FLAGS = "flags"
PATH_UNBREAKABLE = "unbreakable"

KNOWN_PATHS = (PATH_TYPE, PATH_NAME, PATH_LORE, PATH_ENCHANTMENTS, PATH_FLAGS, PATH_UNBREAKABLE)


def normalize_key(value: Any) -> str:
    """Item type and enchantment ids compare as lower-case namespaced keys, so
    STICK, stick and minecraft:stick are the same thing."""
    key = str(getattr(value, "key", value)).strip().lower().replace(" ", "_")
    if ":" not in key:
        key = f"{DEFAULT_NAMESPACE}:{key}"
    return key


def item_type_key(item: "ItemStack") -> str:
    return normalize_key(item.type)


class BlockedItem:
    """A partial item description; an item is blocked when it matches every property that is set."""

    def __init__(self, type: Optional[str] = None, name: Optional[str] = None,
                 lore: Optional[Iterable[str]] = None, enchantments: Optional[dict[str, Optional[int]]] = None,
                 flags: Optional[Iterable[str]] = None, unbreakable: Optional[bool] = None):
        self.type = normalize_key(type) if type is not None else None
        self.name = name
        self.lore = list(lore) if lore is not None else None
        self.enchantments = (
            {normalize_key(ench): level for ench, level in enchantments.items()}
            if enchantments is not None else None
        )
        self.flags = frozenset(str(flag).lower() for flag in flags) if flags is not None else None
        self.unbreakable = unbreakable

    @property
    def meta_dependent(self) -> bool:
        return any(value is not None for value in (self.name, self.lore, self.enchantments, self.flags, self.unbreakable))

    @property
    def is_empty(self) -> bool:
        return self.type is None and not self.meta_dependent

    @classmethod
    def from_config(cls, section: dict) -> "BlockedItem":
        """Builds a blocked item from one entry of the blocked_items config list.

        Raises ValueError if a property has the wrong shape.
        """
        if not isinstance(section, dict):
            raise ValueError(f"Expected a map of item properties, got {type(section).__name__}")

        kwargs = {}

        if PATH_TYPE in section:
            kwargs["type"] = _require_str(section[PATH_TYPE], PATH_TYPE)

        if PATH_NAME in section:
            kwargs["name"] = translate_color_codes(_require_str(section[PATH_NAME], PATH_NAME))

        if PATH_LORE in section:
            lore = _require_list(section[PATH_LORE], PATH_LORE)
            kwargs["lore"] = [translate_color_codes(str(line)) for line in lore]

        if PATH_ENCHANTMENTS in section:
            kwargs["enchantments"] = parse_enchantments(section[PATH_ENCHANTMENTS])

        if PATH_FLAGS in section:
            kwargs["flags"] = [str(flag) for flag in _require_list(section[PATH_FLAGS], PATH_FLAGS)]

        if PATH_UNBREAKABLE in section:
            unbreakable = section[PATH_UNBREAKABLE]
            if not isinstance(unbreakable, bool):
                raise ValueError(f"'{PATH_UNBREAKABLE}' must be true or false, got {unbreakable!r}")
            kwargs["unbreakable"] = unbreakable

        return cls(**kwargs)

    def matches(self, item: "ItemStack") -> bool:
        if self.type is not None and self.type != item_type_key(item):
            return False

        if not self.meta_dependent:
            return True

        meta = item.item_meta
        if meta is None:
            return False

        if self.name is not None and (not meta.has_display_name or meta.display_name != self.name):
            return False
        if self.lore is not None and (not meta.has_lore or list(meta.lore) != self.lore):
            return False
        if self.enchantments is not None and (not meta.has_enchants or not self.matches_enchantments(meta.enchants)):
            return False
        if self.flags is not None and self.flags != frozenset(str(flag).lower() for flag in _item_flags(meta)):
            return False
        if self.unbreakable is not None and self.unbreakable != bool(meta.is_unbreakable):
            return False

        return True

    def matches_enchantments(self, enchants: dict) -> bool:
        enchants = {normalize_key(ench): level for ench, level in enchants.items()}
        if enchants.keys() != self.enchantments.keys():
            return False

        for ench, level in self.enchantments.items():
            if level is not None and enchants[ench] != level:
                return False
        return True

    def __repr__(self):
        props = {
            PATH_TYPE: self.type,
            PATH_NAME: self.name,
            PATH_LORE: self.lore,
            PATH_ENCHANTMENTS: self.enchantments,
            PATH_FLAGS: sorted(self.flags) if self.flags is not None else None,
            PATH_UNBREAKABLE: self.unbreakable,
        }
        return "BlockedItem(" + ", ".join(f"{k}={v!r}" for k, v in props.items() if v is not None) + ")"


def parse_enchantments(value) -> dict[str, Optional[int]]:
    """Accepts ["sharpness:5", "unbreaking:?"] or {"sharpness": 5, "unbreaking": "?"}."""
    if isinstance(value, dict):
        pairs = list(value.items())
    else:
        pairs = []
        for entry in _require_list(value, PATH_ENCHANTMENTS):
            name, sep, level = str(entry).rpartition(":")
            if not sep or not name:
                raise ValueError(f"Enchantment '{entry}' must be written as <enchantment>:<level>")
            pairs.append((name, level))

    enchantments = {}
    for name, level in pairs:
        level = str(level).strip()
        if level == WILDCARD_LEVEL:
            enchantments[name] = None
        elif level.isdigit():
            enchantments[name] = int(level)
        else:
            raise ValueError(f"Enchantment level for '{name}' must be a number or '{WILDCARD_LEVEL}', got '{level}'")
    return enchantments


def load_blocked_items(entries: Optional[Iterable]) -> list[BlockedItem]:
    """Builds the blocked item list, skipping (and reporting) entries that cannot be used."""
    blocked_items = []
    for index, entry in enumerate(entries or []):
        try:
            blocked = BlockedItem.from_config(entry)
        except ValueError as e:
            print(f"[RepairItem] Skipping blocked item #{index + 1}: {e}")
            continue

        unknown = [key for key in entry if key not in KNOWN_PATHS]
        if unknown:
            print(f"[RepairItem] Blocked item #{index + 1} has unknown properties: {', '.join(map(str, unknown))}")

        if blocked.is_empty:
            print(f"[RepairItem] Skipping blocked item #{index + 1}: no properties set, it would block every item")
            continue

        blocked_items.append(blocked)
    return blocked_items


def _item_flags(meta) -> Iterable:
    return getattr(meta, "item_flags", None) or ()


def _require_str(value, path: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{path}' must be a non-empty string, got {value!r}")
    return value


def _require_list(value, path: str) -> list:
    if not isinstance(value, list):
        raise ValueError(f"'{path}' must be a list, got {value!r}")
    return value
