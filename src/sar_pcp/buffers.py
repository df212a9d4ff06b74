"""Double-buffered snapshots.

Each statistics category keeps two snapshot slots. One holds the current
sample and the other the previous one; the roles swap every period.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sar_pcp.records import StatsRecord

R = TypeVar("R", bound=StatsRecord)


@dataclass(frozen=True)
class Snapshot(Generic[R]):
    """Immutable, positionally addressable set of records from one sample."""

    records: tuple[R, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        """Return the number of valid entities."""
        return len(self.records)

    def __getitem__(self, index: int) -> R:
        return self.records[index]

    def __iter__(self) -> Iterator[R]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        """Return True if the snapshot holds no entities."""
        return not self.records

    def get(self, index: int) -> R | None:
        """Return the record at index, or None if out of range."""
        if 0 <= index < len(self.records):
            return self.records[index]
        return None

    def first(self) -> R | None:
        """Return the single record of a global category, if present."""
        return self.get(0)


EMPTY: Snapshot = Snapshot()


class SnapshotPair(Generic[R]):
    """Two fixed snapshot slots with a role tag naming the current one.

    push() writes the non-current slot and then flips the tag, so the slot
    that was current becomes previous without any copy.
    """

    def __init__(self) -> None:
        self._slots: list[Snapshot[R]] = [EMPTY, EMPTY]
        self._curr = 0
        self._pushes = 0

    def __len__(self) -> int:
        """Return the number of populated slots (0, 1 or 2)."""
        return min(self._pushes, 2)

    @property
    def curr(self) -> int:
        """Index of the slot holding the current snapshot."""
        return self._curr

    @property
    def current(self) -> Snapshot[R]:
        return self._slots[self._curr]

    @property
    def previous(self) -> Snapshot[R]:
        """Previous snapshot; empty until two samples have been pushed."""
        return self._slots[1 - self._curr]

    @property
    def has_current(self) -> bool:
        return self._pushes > 0

    def push(self, records: Iterable[R]) -> None:
        """Store a new sample and make it current."""
        target = 1 - self._curr if self._pushes else self._curr
        self._slots[target] = Snapshot(tuple(records))
        self._curr = target
        self._pushes += 1

    def clear(self) -> None:
        """Drop both samples."""
        self._slots = [EMPTY, EMPTY]
        self._curr = 0
        self._pushes = 0
