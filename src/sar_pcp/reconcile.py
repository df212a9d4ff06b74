"""Matching current-period entities to their previous-period records.

Two policies exist:

- Network interfaces are looked up by name. An interface missing from the
  previous sample is "newly registered": it is paired with an all-zero
  record and reports zero rates until it has a real previous sample.
- Serial lines are found by a circular scan on the line number. A line with
  no previous match is skipped entirely until a match exists.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

from sar_pcp.filters import is_visible
from sar_pcp.records import NetDevStats, NetEdevStats, SerialStats

log = structlog.get_logger()

N = TypeVar("N", NetDevStats, NetEdevStats)

# Counters above this value are close enough to 2**64 to wrap around
_OVERFLOW_THRESHOLD = (2**64 - 1) >> 1

_NET_DEV_COUNTERS = (
    "rx_packets",
    "tx_packets",
    "rx_bytes",
    "tx_bytes",
    "rx_compressed",
    "tx_compressed",
    "multicast",
)


class InterfaceRegistry:
    """Name -> index mapping of the interfaces in one snapshot."""

    def __init__(self, names: Sequence[str]) -> None:
        self._index: dict[str, int] = {}
        for i, name in enumerate(names):
            # First occurrence wins if a collector ever reports a duplicate
            self._index.setdefault(name, i)

    @classmethod
    def from_snapshot(cls, records: Sequence[NetDevStats | NetEdevStats]) -> "InterfaceRegistry":
        return cls([r.interface for r in records])

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def lookup(self, name: str) -> int | None:
        """Return the index of name in the snapshot, or None if unregistered."""
        return self._index.get(name)


def _counter_wrapped(curr: NetDevStats, prev: NetDevStats, direction: str) -> bool:
    """Return True if bytes or packets in one direction wrapped around.

    A wrap is assumed when one of bytes/packets went backwards while the
    other went forward and the previous value was above half the 64-bit range.
    """
    c_bytes = getattr(curr, f"{direction}_bytes")
    p_bytes = getattr(prev, f"{direction}_bytes")
    c_packets = getattr(curr, f"{direction}_packets")
    p_packets = getattr(prev, f"{direction}_packets")

    if c_bytes < p_bytes and c_packets > p_packets and p_bytes > _OVERFLOW_THRESHOLD:
        return True
    if c_packets < p_packets and c_bytes > p_bytes and p_packets > _OVERFLOW_THRESHOLD:
        return True
    return False


def was_reregistered(curr: NetDevStats, prev: NetDevStats) -> bool:
    """Return True if an interface appears to have been unregistered and registered again.

    Any traffic counter going backwards means the device was re-created,
    unless the decrease is explained by a 64-bit counter wrap.
    """
    if not any(getattr(curr, f) < getattr(prev, f) for f in _NET_DEV_COUNTERS):
        return False
    return not (_counter_wrapped(curr, prev, "rx") or _counter_wrapped(curr, prev, "tx"))


@dataclass(frozen=True)
class InterfaceMatch(Generic[N]):
    """A current interface record paired with its previous-period record.

    new is True when the interface was not registered in the previous
    sample (or was re-registered since), in which case previous is the
    all-zero sentinel.
    """

    current: N
    previous: N
    new: bool = False


def match_interface(
    record: N,
    previous: Sequence[N],
    registry: InterfaceRegistry | None = None,
) -> InterfaceMatch[N]:
    """Pair an interface with its previous record, or with the zero sentinel.

    Args:
        record: Current-period record
        previous: Previous-period records
        registry: Name index of previous (built on demand if omitted)
    """
    registry = registry if registry is not None else InterfaceRegistry.from_snapshot(previous)
    sentinel = type(record).zero()

    j = registry.lookup(record.interface)
    if j is None:
        log.debug("interface_registered", interface=record.interface)
        return InterfaceMatch(record, sentinel, new=True)

    prev = previous[j]
    if isinstance(record, NetDevStats) and was_reregistered(record, prev):
        log.debug("interface_reregistered", interface=record.interface)
        return InterfaceMatch(record, sentinel, new=True)
    return InterfaceMatch(record, prev)


def reconcile_interfaces(
    current: Sequence[N],
    previous: Sequence[N],
    visible: Callable[[str], bool] | None = None,
) -> list[InterfaceMatch[N]]:
    """Pair every visible current interface with its previous record.

    Interfaces rejected by visible are dropped before matching. Interfaces
    that are new (or re-registered) are paired with an all-zero record.
    """
    registry = InterfaceRegistry.from_snapshot(previous)
    matches: list[InterfaceMatch[N]] = []
    for record in current:
        if not is_visible(visible, record.interface):
            continue
        matches.append(match_interface(record, previous, registry))
    return matches


def find_serial_match(
    current: Sequence[SerialStats],
    previous: Sequence[SerialStats],
    pos: int,
) -> SerialStats | None:
    """Find the previous record of the serial line at current[pos].

    The scan starts at the same position (clamped to the previous length) and
    wraps around once. Returns None if the line has no previous record.
    """
    if not previous:
        return None

    line = current[pos].line
    j = min(pos, len(previous) - 1)
    start = j
    while True:
        if previous[j].line == line:
            return previous[j]
        j += 1
        if j >= len(previous):
            j = 0
        if j == start:
            return None


def reconcile_serial(
    current: Sequence[SerialStats],
    previous: Sequence[SerialStats],
) -> list[tuple[SerialStats, SerialStats]]:
    """Pair every current serial line that has a previous record.

    Lines without a match are left out and logged at debug level.
    """
    pairs: list[tuple[SerialStats, SerialStats]] = []
    for i, record in enumerate(current):
        prev = find_serial_match(current, previous, i)
        if prev is None:
            log.debug("serial_line_unmatched", line=record.line)
            continue
        pairs.append((record, prev))
    return pairs
