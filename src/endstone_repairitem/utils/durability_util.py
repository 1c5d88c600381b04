from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from endstone.inventory import ItemStack


class DurabilityAccessor(ABC):
    """Reads and resets the damage of an item on one generation of the host API."""

    name = "unknown"

    def max_durability(self, item: "ItemStack") -> int:
        return getattr(item.type, "max_durability", 0) or 0

    @abstractmethod
    def get_damage(self, item: "ItemStack") -> int:
        ...

    @abstractmethod
    def set_damage(self, item: "ItemStack", damage: int) -> None:
        ...


class MetaDurability(DurabilityAccessor):
    """Damage stored in the item meta (meta.damage), written back with set_item_meta."""

    name = "item meta"

    def get_damage(self, item):
        meta = item.item_meta
        if meta is None:
            return 0
        return meta.damage

    def set_damage(self, item, damage):
        meta = item.item_meta
        meta.damage = damage
        item.set_item_meta(meta)


class LegacyDurability(DurabilityAccessor):
    """Damage stored as the item's data (aux) value."""

    name = "legacy data value"

    def get_damage(self, item):
        return item.data

    def set_damage(self, item, damage):
        item.data = damage


def select_durability_accessor(meta_class, item_class) -> Optional[DurabilityAccessor]:
    """Picks the accessor matching the running host, or None if item damage cannot be reached."""
    if meta_class is not None and hasattr(meta_class, "damage"):
        return MetaDurability()
    if item_class is not None and hasattr(item_class, "data"):
        return LegacyDurability()
    return None


def supports_off_hand(inventory_class) -> bool:
    return inventory_class is not None and hasattr(inventory_class, "item_in_off_hand")
