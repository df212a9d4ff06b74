"""Visibility predicates deciding which entities get exported.

Exporters only need a callable: ``int -> bool`` for CPU positions and
``str -> bool`` for device names. A predicate of None means everything is
visible.
"""

from collections.abc import Callable, Iterable

CpuPredicate = Callable[[int], bool]
NamePredicate = Callable[[str], bool]


class CpuBitmap:
    """Bitmap of CPU positions: bit 0 is CPU "all", bit N is CPU N-1.

    Positions past the end of the bitmap are not visible. An empty bitmap is
    treated as malformed and selects everything.
    """

    def __init__(self, bitmap: bytes | bytearray | None = None) -> None:
        self._bitmap = bytes(bitmap) if bitmap else None

    @classmethod
    def from_cpus(
        cls, cpus: Iterable[int] | None = None, *, nr_cpu: int, include_all: bool = True
    ) -> "CpuBitmap":
        """Build a bitmap selecting the given CPU numbers.

        Args:
            cpus: CPU numbers (0-based) to select; None or empty selects all
            nr_cpu: Number of CPUs on the machine (excluding "all")
            include_all: Whether to select the "all" aggregate

        Raises:
            ValueError: If a CPU number is negative.
        """
        selected = list(cpus or [])
        for cpu in selected:
            if cpu < 0:
                raise ValueError(f"CPU number must be >= 0, got {cpu}")
        if not selected:
            selected = list(range(nr_cpu))

        nbits = max([nr_cpu] + [c + 1 for c in selected]) + 1
        bitmap = bytearray((nbits + 7) // 8)
        if include_all:
            bitmap[0] |= 1
        for cpu in selected:
            pos = cpu + 1
            bitmap[pos >> 3] |= 1 << (pos & 0x07)
        return cls(bitmap)

    @property
    def size(self) -> int | None:
        """Number of positions covered by the bitmap (None if unrestricted)."""
        return None if self._bitmap is None else len(self._bitmap) * 8

    def is_visible(self, pos: int) -> bool:
        """Return True if CPU position pos is selected."""
        if self._bitmap is None:
            return True
        if pos < 0 or (pos >> 3) >= len(self._bitmap):
            return False
        return bool(self._bitmap[pos >> 3] & (1 << (pos & 0x07)))

    __call__ = is_visible


class ItemList:
    """Allow-list of device names. An empty list allows every device."""

    def __init__(self, names: Iterable[str] | None = None) -> None:
        self._names = frozenset(names or ())

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_visible(name)

    def is_visible(self, name: str) -> bool:
        if not self._names:
            return True
        return name in self._names

    __call__ = is_visible


def real_cpus_only(pos: int) -> bool:
    """Select every CPU but not the "all" aggregate at position 0."""
    return pos > 0


def is_visible(predicate: Callable[[object], bool] | None, key: object) -> bool:
    """Apply an optional predicate; None means visible."""
    if predicate is None:
        return True
    return bool(predicate(key))
