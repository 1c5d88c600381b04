import threading
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from endstone_repairitem.utils.blocked_item_util import BlockedItem, item_type_key, load_blocked_items
from endstone_repairitem.utils.command_util import RepairFunction
from endstone_repairitem.utils.durability_util import DurabilityAccessor
from endstone_repairitem.utils.repair_result_util import RepairResult, RepairStatus
from endstone_repairitem.utils.slot_range_util import ARMOR_SLOTS, HOTBAR_SLOTS, INVENTORY_SLOTS, SlotRange

if TYPE_CHECKING:
    from endstone import Player
    from endstone.inventory import ItemStack, PlayerInventory

AIR = "minecraft:air"

# Armor slot index -> PlayerInventory property
ARMOR_PIECES = ("helmet", "chestplate", "leggings", "boots")


class Repairer:
    """Repairs player items, honoring the configured blocked items."""

    def __init__(self, accessor: Optional[DurabilityAccessor], off_hand_supported: bool = True):
        self.accessor = accessor
        self.off_hand_supported = off_hand_supported
        self._blocked_items: tuple[BlockedItem, ...] = ()
        self._reload_lock = threading.Lock()

        if accessor is None:
            print("[RepairItem] Item durability cannot be accessed on this server version, every repair will fail. "
                  "If the problem persists after a restart, please report it.")

        self._functions: dict[RepairFunction, Callable] = {
            RepairFunction.ALL: self.repair_all,
            RepairFunction.INVENTORY: self.repair_inventory,
            RepairFunction.ARMOR: self.repair_armor,
            RepairFunction.HOTBAR: self.repair_hotbar,
            RepairFunction.BOTH_HANDS: self.repair_both_hands,
            RepairFunction.MAIN_HAND: lambda player, blocked=None: self.repair_hand(player, True, blocked),
            RepairFunction.OFF_HAND: lambda player, blocked=None: self.repair_hand(player, False, blocked),
        }

    @property
    def blocked_items(self) -> tuple[BlockedItem, ...]:
        return self._blocked_items

    def reload(self, entries: Optional[Iterable]) -> int:
        """Replaces the blocked items with the ones built from the given config entries."""
        with self._reload_lock:
            blocked_items = tuple(load_blocked_items(entries))
            self._blocked_items = blocked_items
        return len(blocked_items)

    def is_blocked(self, item: "ItemStack", blocked_items: Optional[Sequence[BlockedItem]] = None) -> bool:
        if blocked_items is None:
            blocked_items = self._blocked_items
        return any(blocked.matches(item) for blocked in blocked_items)

    def repair(self, player: "Player", function: RepairFunction) -> RepairResult:
        handler = self._functions.get(function)
        if handler is None:
            raise ValueError(f"{function} is not a repair function")
        return handler(player)

    def repair_all(self, player: "Player", blocked_items=None) -> RepairResult:
        """Repairs the inventory and the armor."""
        if blocked_items is None:
            blocked_items = self._blocked_items
        return self.repair_inventory(player, blocked_items).merge(self.repair_armor(player, blocked_items))

    def repair_inventory(self, player: "Player", blocked_items=None) -> RepairResult:
        """Repairs both hands and every inventory slot, without the armor."""
        return self._repair_hands_and_slots(player, INVENTORY_SLOTS, blocked_items)

    def repair_hotbar(self, player: "Player", blocked_items=None) -> RepairResult:
        """Repairs both hands and the hotbar."""
        return self._repair_hands_and_slots(player, HOTBAR_SLOTS, blocked_items)

    def repair_armor(self, player: "Player", blocked_items=None) -> RepairResult:
        if blocked_items is None:
            blocked_items = self._blocked_items

        inventory = player.inventory
        result = RepairResult.empty()
        for slot in ARMOR_SLOTS:
            piece = ARMOR_PIECES[slot]
            item = getattr(inventory, piece)
            local = self._repair_item(item, blocked_items)
            if local.status is RepairStatus.SUCCESS:
                setattr(inventory, piece, item)
            result = result.merge(local)
        return result

    def repair_both_hands(self, player: "Player", blocked_items=None) -> RepairResult:
        if blocked_items is None:
            blocked_items = self._blocked_items
        return self.repair_hand(player, True, blocked_items).merge(self.repair_hand(player, False, blocked_items))

    def repair_hand(self, player: "Player", main_hand: bool, blocked_items=None) -> RepairResult:
        if not main_hand and not self.off_hand_supported:
            return RepairResult.error(RepairStatus.UNSUPPORTED)

        if blocked_items is None:
            blocked_items = self._blocked_items

        inventory = player.inventory
        item = inventory.item_in_main_hand if main_hand else inventory.item_in_off_hand
        result = self._repair_item(item, blocked_items)
        if result.status is RepairStatus.SUCCESS:
            if main_hand:
                inventory.set_item(inventory.held_item_slot, item)
            else:
                inventory.item_in_off_hand = item
        return result

    def repair_item(self, item: Optional["ItemStack"]) -> RepairResult:
        """Resets the damage of the given item in place.

        The caller is responsible for putting the item back into its slot.
        """
        return self._repair_item(item, self._blocked_items)

    def _repair_hands_and_slots(self, player: "Player", slots: SlotRange, blocked_items) -> RepairResult:
        if blocked_items is None:
            blocked_items = self._blocked_items

        inventory: "PlayerInventory" = player.inventory
        result = self.repair_both_hands(player, blocked_items)

        # The held slot was already handled as the main hand
        held_slot = inventory.held_item_slot
        for slot in slots:
            if slot == held_slot:
                continue
            item = inventory.get_item(slot)
            local = self._repair_item(item, blocked_items)
            if local.status is RepairStatus.SUCCESS:
                inventory.set_item(slot, item)
            result = result.merge(local)
        return result

    def _repair_item(self, item: Optional["ItemStack"], blocked_items: Sequence[BlockedItem]) -> RepairResult:
        if self.accessor is None:
            return RepairResult.error(RepairStatus.UNKNOWN)

        if item is None or item_type_key(item) == AIR or self.accessor.max_durability(item) <= 0:
            return RepairResult.error(RepairStatus.NOT_REPAIRED)

        if self.is_blocked(item, blocked_items):
            return RepairResult.error(RepairStatus.NOT_REPAIRED)

        try:
            if not self.accessor.get_damage(item):
                return RepairResult.error(RepairStatus.NOT_REPAIRED)
            self.accessor.set_damage(item, 0)
        except (AttributeError, TypeError) as e:
            print(f"[RepairItem] Failed to repair {item_type_key(item)} using the {self.accessor.name} accessor: {e}")
            return RepairResult.error(RepairStatus.UNKNOWN)

        return RepairResult.success()
