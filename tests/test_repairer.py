"""Tests for src/endstone_repairitem/utils/repair_util.py."""
from __future__ import annotations

import pytest

from conftest import FakePlayer, make_item
from endstone_repairitem.utils.command_util import RepairFunction
from endstone_repairitem.utils.durability_util import MetaDurability
from endstone_repairitem.utils.repair_result_util import RepairResult, RepairStatus
from endstone_repairitem.utils.repair_util import Repairer

NOT_REPAIRED = RepairStatus.NOT_REPAIRED


def damage_of(item) -> int:
    return item.item_meta.damage


def equip(player: FakePlayer, *, slots=None, off_hand=None, armor=None):
    """Fills a fresh inventory: slots maps index -> item, armor maps piece -> item."""
    inventory = player.inventory
    for index, item in (slots or {}).items():
        inventory.set_item(index, item)
    if off_hand is not None:
        inventory.item_in_off_hand = off_hand
    for piece, item in (armor or {}).items():
        setattr(inventory, piece, item)
    inventory.writes = 0
    return player


def loaded_player(name="Alice") -> FakePlayer:
    return equip(
        FakePlayer(name),
        slots={
            0: make_item("diamond_sword", damage=5),
            3: make_item("stick", damage=2),
            5: make_item("bow", damage=0),
            12: make_item("iron_pickaxe", damage=30),
            20: make_item("dirt", max_durability=0),
        },
        off_hand=make_item("shield", damage=7),
        armor={
            "helmet": make_item("iron_helmet", damage=1),
            "boots": make_item("iron_boots", damage=0),
        },
    )


class TestRepairItem:
    def test_damaged_item_is_reset(self, repairer):
        item = make_item("diamond_sword", damage=5)
        assert repairer.repair_item(item) == RepairResult.success()
        assert damage_of(item) == 0

    def test_undamaged_item_is_idempotent(self, repairer):
        item = make_item("diamond_sword", damage=0)
        first = repairer.repair_item(item)
        second = repairer.repair_item(item)
        assert first == second == RepairResult.error(NOT_REPAIRED)

    def test_second_repair_never_counts(self, repairer):
        item = make_item("diamond_sword", damage=5)
        repairer.repair_item(item)
        assert repairer.repair_item(item) == RepairResult.error(NOT_REPAIRED)

    @pytest.mark.parametrize("item", [
        None,
        make_item("air", damage=3),
        make_item("dirt", damage=3, max_durability=0),
    ])
    def test_absent_or_unrepairable(self, repairer, item):
        assert repairer.repair_item(item).status is NOT_REPAIRED

    def test_blocked_item_is_left_alone(self, repairer):
        repairer.reload([{"type": "diamond_sword"}])
        item = make_item("diamond_sword", damage=5)
        assert repairer.repair_item(item).status is NOT_REPAIRED
        assert damage_of(item) == 5

    def test_no_accessor_is_unknown(self, capsys):
        repairer = Repairer(None)
        assert "every repair will fail" in capsys.readouterr().out
        assert repairer.repair_item(make_item("diamond_sword", damage=5)) == RepairResult.error(RepairStatus.UNKNOWN)
        assert repairer.repair_both_hands(loaded_player()).status is RepairStatus.UNKNOWN

    def test_accessor_failure_is_unknown(self, capsys):
        class Broken(MetaDurability):
            def set_damage(self, item, damage):
                raise AttributeError("damage")

        repairer = Repairer(Broken())
        assert repairer.repair_item(make_item("bow", damage=3)).status is RepairStatus.UNKNOWN
        assert "Failed to repair minecraft:bow" in capsys.readouterr().out


class TestHands:
    def test_main_hand_written_back(self, repairer):
        player = loaded_player()
        assert repairer.repair_hand(player, True) == RepairResult.success()
        assert damage_of(player.inventory.get_item(0)) == 0
        assert damage_of(player.inventory.item_in_off_hand) == 7

    def test_off_hand_written_back(self, repairer):
        player = loaded_player()
        assert repairer.repair_hand(player, False) == RepairResult.success()
        assert damage_of(player.inventory.item_in_off_hand) == 0

    def test_off_hand_unsupported(self):
        repairer = Repairer(MetaDurability(), off_hand_supported=False)
        player = loaded_player()
        assert repairer.repair_hand(player, False) == RepairResult.error(RepairStatus.UNSUPPORTED)
        assert damage_of(player.inventory.item_in_off_hand) == 7

    def test_both_hands_sword_and_empty_off_hand(self, repairer):
        player = equip(FakePlayer("Alice"), slots={0: make_item("diamond_sword", damage=5)})
        assert repairer.repair_both_hands(player) == RepairResult.success(1)

    def test_both_hands_without_off_hand_support(self):
        repairer = Repairer(MetaDurability(), off_hand_supported=False)
        player = equip(FakePlayer("Alice"), slots={0: make_item("diamond_sword", damage=5)})
        assert repairer.repair_both_hands(player) == RepairResult.success(1)

    def test_nothing_held(self, repairer):
        assert repairer.repair_both_hands(FakePlayer("Alice")) == RepairResult.error(NOT_REPAIRED)

    def test_undamaged_items_are_not_written(self, repairer):
        player = equip(FakePlayer("Alice"), slots={0: make_item("diamond_sword")})
        repairer.repair_both_hands(player)
        assert player.inventory.writes == 0


class TestScopes:
    def test_armor(self, repairer):
        player = loaded_player()
        assert repairer.repair_armor(player) == RepairResult.success(1)
        assert damage_of(player.inventory.helmet) == 0
        assert damage_of(player.inventory.get_item(0)) == 5

    def test_armor_empty(self, repairer):
        assert repairer.repair_armor(FakePlayer("Alice")) == RepairResult.error(NOT_REPAIRED)

    def test_hotbar(self, repairer):
        player = loaded_player()
        # sword (main hand), shield (off hand), stick in slot 3
        assert repairer.repair_hotbar(player) == RepairResult.success(3)
        assert damage_of(player.inventory.get_item(12)) == 30

    def test_inventory_counts_held_item_once(self, repairer):
        player = loaded_player()
        # sword, shield, stick, pickaxe
        assert repairer.repair_inventory(player) == RepairResult.success(4)
        assert damage_of(player.inventory.helmet) == 1

    def test_held_slot_outside_hotbar_start(self, repairer):
        player = loaded_player()
        player.inventory.held_item_slot = 3
        assert repairer.repair_hotbar(player) == RepairResult.success(3)
        assert damage_of(player.inventory.get_item(0)) == 0
        assert damage_of(player.inventory.get_item(3)) == 0

    def test_all(self, repairer):
        player = loaded_player()
        assert repairer.repair_all(player) == RepairResult.success(5)
        inventory = player.inventory
        assert damage_of(inventory.helmet) == 0
        assert damage_of(inventory.item_in_off_hand) == 0
        assert damage_of(inventory.get_item(12)) == 0

    def test_all_equals_inventory_merged_with_armor(self, repairer):
        left, right = loaded_player(), loaded_player()
        assert repairer.repair_all(left) == repairer.repair_inventory(right).merge(repairer.repair_armor(right))

    def test_blocked_stick_excluded_from_inventory(self, repairer):
        repairer.reload([{"type": "STICK"}])
        player = equip(FakePlayer("Alice"), slots={3: make_item("stick", damage=2)})
        assert repairer.repair_inventory(player) == RepairResult.error(NOT_REPAIRED)
        assert damage_of(player.inventory.get_item(3)) == 2


class TestRepairDispatch:
    @pytest.mark.parametrize("function, expected", [
        (RepairFunction.ALL, 5),
        (RepairFunction.INVENTORY, 4),
        (RepairFunction.ARMOR, 1),
        (RepairFunction.HOTBAR, 3),
        (RepairFunction.BOTH_HANDS, 2),
        (RepairFunction.MAIN_HAND, 1),
        (RepairFunction.OFF_HAND, 1),
    ])
    def test_functions(self, repairer, function, expected):
        assert repairer.repair(loaded_player(), function) == RepairResult.success(expected)

    @pytest.mark.parametrize("function", [RepairFunction.RELOAD, RepairFunction.HELP])
    def test_meta_function_rejected(self, repairer, function):
        with pytest.raises(ValueError):
            repairer.repair(loaded_player(), function)


class TestReload:
    def test_replaces_collection(self, repairer):
        assert repairer.reload([{"type": "stick"}, {"type": "bow"}]) == 2
        first = repairer.blocked_items
        assert repairer.reload([{"type": "shield"}]) == 1
        assert [b.type for b in repairer.blocked_items] == ["minecraft:shield"]
        assert [b.type for b in first] == ["minecraft:stick", "minecraft:bow"]

    def test_pass_sees_one_snapshot(self, repairer):
        repairer.reload([{"type": "stick"}])
        snapshot = repairer.blocked_items
        repairer.reload([])
        player = equip(FakePlayer("Alice"), slots={3: make_item("stick", damage=2)})
        assert repairer.repair_inventory(player, snapshot).status is NOT_REPAIRED
        assert repairer.repair_inventory(player) == RepairResult.success()

    def test_unsupported_entries_skipped(self, repairer, capsys):
        assert repairer.reload([{"type": "stick"}, {}]) == 1
        assert "would block every item" in capsys.readouterr().out
