class SlotRange:
    """Precomputed run of slot indices, from min_slot (inclusive) to max_slot (exclusive)."""

    def __init__(self, min_slot: int, max_slot: int):
        if min_slot >= max_slot:
            raise ValueError(f"Invalid slot range: {min_slot} must be lower than {max_slot}")

        self._contents = tuple(range(min_slot, max_slot))

    @property
    def contents(self) -> tuple[int, ...]:
        return self._contents

    def __iter__(self):
        return iter(self._contents)

    def __len__(self):
        return len(self._contents)

    def __contains__(self, slot):
        return slot in self._contents

    def __repr__(self):
        return f"SlotRange({self._contents[0]}, {self._contents[-1] + 1})"


INVENTORY_SLOTS = SlotRange(0, 36)
ARMOR_SLOTS = SlotRange(0, 4)
HOTBAR_SLOTS = SlotRange(0, 9)
