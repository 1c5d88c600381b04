from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class RepairStatus(Enum):
    SUCCESS = "success"
    NOT_REPAIRED = "not_repaired"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RepairResult:
    """Outcome of a repair: a status and the amount of items repaired.

    The empty result (no status) is only a starting point for merging; it is
    never a final outcome.
    """
    status: Optional[RepairStatus]
    repaired: int = 0

    def __post_init__(self):
        if self.repaired < 0:
            raise ValueError("Repaired item count cannot be negative")
        if self.repaired > 0 and self.status is not RepairStatus.SUCCESS:
            raise ValueError(f"A {self.status} result cannot have repaired items")

    @classmethod
    def empty(cls) -> "RepairResult":
        return _EMPTY

    @classmethod
    def success(cls, repaired: int = 1) -> "RepairResult":
        return cls(RepairStatus.SUCCESS, repaired)

    @classmethod
    def error(cls, status: RepairStatus) -> "RepairResult":
        return cls(status, 0)

    @property
    def is_empty(self) -> bool:
        return self.status is None

    def merge(self, other: "RepairResult") -> "RepairResult":
        if self.is_empty:
            return other
        if other.is_empty:
            return self

        repaired = self.repaired + other.repaired
        if self.status is other.status:
            return RepairResult(self.status, repaired)

        return RepairResult(RepairStatus.SUCCESS if repaired > 0 else RepairStatus.NOT_REPAIRED, repaired)


_EMPTY = RepairResult(None, 0)


def merge_all(results: Iterable[RepairResult]) -> RepairResult:
    merged = RepairResult.empty()
    for result in results:
        merged = merged.merge(result)
    return merged
