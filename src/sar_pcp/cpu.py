"""CPU utilization export.

Position 0 of a CPU snapshot is the "all" pseudo-CPU and position N is CPU
N-1. On SMP machines the "all" figures are rebuilt from the online CPUs
rather than taken from position 0, so offline CPUs do not drag it down.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields, replace

import structlog

from sar_pcp.deltas import busy_percent
from sar_pcp.filters import is_visible
from sar_pcp.records import CpuStats
from sar_pcp.sink import MetricSink, format_float

log = structlog.get_logger()

_CPU_FIELDS = tuple(f.name for f in fields(CpuStats))

# Order matches the historical export order of the PCP backend
_TICKLESS_ZERO = (
    "user",
    "nice",
    "sys",
    "iowait",
    "steal",
    "hardirq",
    "softirq",
    "guest",
    "guest_nice",
)


@dataclass(frozen=True)
class GlobalCpu:
    """Result of aggregating per-CPU statistics into CPU "all"."""

    interval: int
    current: CpuStats
    previous: CpuStats
    offline: frozenset[int]


def _at(records: Sequence[CpuStats], pos: int) -> CpuStats:
    return records[pos] if pos < len(records) else CpuStats.zero()


def effective_previous(curr: CpuStats, prev: CpuStats) -> CpuStats:
    """Return the previous record to compute deltas against.

    When a CPU comes back online some kernels restart idle and iowait from
    zero while other fields carry on, so their previous values are read as 0
    whenever either of them went backwards.
    """
    if curr.idle < prev.idle or curr.iowait < prev.iowait:
        return replace(prev, idle=0, iowait=0)
    return prev


def per_cpu_interval(curr: CpuStats, prev: CpuStats) -> int:
    """Return the number of ticks elapsed for one CPU (0 means tickless).

    Guest time is part of user/nice; if user-guest or nice-guest_nice went
    backwards the difference is added back so the interval stays consistent.
    """
    ishift = 0
    if (curr.user - curr.guest) < (prev.user - prev.guest):
        ishift += (prev.user - prev.guest) - (curr.user - curr.guest)
    if (curr.nice - curr.guest_nice) < (prev.nice - prev.guest_nice):
        ishift += (prev.nice - prev.guest_nice) - (curr.nice - curr.guest_nice)

    prev = effective_previous(curr, prev)
    return max(curr.total - prev.total + ishift, 0)


def _add(a: CpuStats, b: CpuStats) -> CpuStats:
    return CpuStats(**{f: getattr(a, f) + getattr(b, f) for f in _CPU_FIELDS})


def global_cpu_statistics(
    current: Sequence[CpuStats],
    previous: Sequence[CpuStats],
    nr_ini: int,
) -> GlobalCpu:
    """Aggregate CPUs 1..nr_ini-1 into CPU "all" and find offline CPUs.

    A CPU whose current tick total is zero is offline: it is left out of the
    aggregate and reported in GlobalCpu.offline.
    """
    interval = 0
    all_curr = CpuStats.zero()
    all_prev = CpuStats.zero()
    offline: set[int] = set()

    for pos in range(1, nr_ini):
        scc = _at(current, pos)
        scp = _at(previous, pos)

        if not scc.total:
            offline.add(pos)
            log.debug("cpu_offline", cpu=pos - 1)
            continue

        interval += per_cpu_interval(scc, scp)
        all_curr = _add(all_curr, scc)
        all_prev = _add(all_prev, effective_previous(scc, scp))

    return GlobalCpu(
        interval=interval,
        current=all_curr,
        previous=all_prev,
        offline=frozenset(offline),
    )


def _metric(pos: int, field: str) -> str:
    return f"kernel.percpu.cpu.{field}" if pos else f"kernel.all.cpu.{field}"


def _put_percentages(
    sink: MetricSink,
    pos: int,
    instance: str | None,
    scc: CpuStats,
    scp: CpuStats,
    interval: int,
) -> None:
    # user and nice exclude guest time, which is reported on its own
    if (scc.user - scc.guest) < (scp.user - scp.guest):
        user = 0.0
    else:
        user = busy_percent(scp.user - scp.guest, scc.user - scc.guest, interval)
    sink.put_value(_metric(pos, "user"), instance, format_float(user))

    if (scc.nice - scc.guest_nice) < (scp.nice - scp.guest_nice):
        nice = 0.0
    else:
        nice = busy_percent(scp.nice - scp.guest_nice, scc.nice - scc.guest_nice, interval)
    sink.put_value(_metric(pos, "nice"), instance, format_float(nice))

    for field in ("sys", "iowait", "steal", "hardirq", "softirq", "guest", "guest_nice", "idle"):
        value = busy_percent(getattr(scp, field), getattr(scc, field), interval)
        sink.put_value(_metric(pos, field), instance, format_float(value))


def export_cpu(
    current: Sequence[CpuStats],
    previous: Sequence[CpuStats],
    sink: MetricSink,
    *,
    nr_ini: int | None = None,
    visible: Callable[[int], bool] | None = None,
) -> int:
    """Export CPU utilization percentages.

    Args:
        current: Current records, position 0 being CPU "all"
        previous: Previous records (empty on the first period)
        sink: Metric sink
        nr_ini: Number of CPU positions metrics were created for, including
            "all"; defaults to len(current) and never less than it
        visible: Predicate on CPU position

    Returns:
        Number of values emitted.
    """
    nr = max(nr_ini or 0, len(current))
    if nr == 0:
        return 0

    aggregate: GlobalCpu | None = None
    offline: frozenset[int] = frozenset()
    if nr > 1:
        aggregate = global_cpu_statistics(current, previous, nr)
        offline = aggregate.offline

    emitted = 0
    for pos in range(nr):
        if not is_visible(visible, pos) or pos in offline:
            continue

        if pos == 0:
            instance = None
            if aggregate is not None:
                scc, scp = aggregate.current, aggregate.previous
                interval = aggregate.interval
            else:
                # Uniprocessor: the interval has not been computed yet
                scc, scp = _at(current, 0), _at(previous, 0)
                interval = per_cpu_interval(scc, scp)
                scp = effective_previous(scc, scp)
            if not interval:
                # CPU "all" cannot be tickless
                interval = 1
        else:
            instance = f"cpu{pos - 1}"
            scc = _at(current, pos)
            scp = _at(previous, pos)
            interval = per_cpu_interval(scc, scp)
            scp = effective_previous(scc, scp)

            if not interval:
                log.debug("cpu_tickless", cpu=pos - 1)
                for field in _TICKLESS_ZERO:
                    sink.put_value(_metric(pos, field), instance, "0")
                sink.put_value(_metric(pos, "idle"), instance, "100")
                emitted += len(_TICKLESS_ZERO) + 1
                continue

        _put_percentages(sink, pos, instance, scc, scp, interval)
        emitted += len(_CPU_FIELDS)

    return emitted
