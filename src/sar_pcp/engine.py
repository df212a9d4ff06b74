"""Activity registry and the export pass that drives every exporter."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import structlog

from sar_pcp.activities import (
    MemoryOptions,
    export_io,
    export_irq,
    export_ktables,
    export_memory,
    export_nfs,
    export_nfsd,
    export_paging,
    export_pcsw,
    export_queue,
    export_swap,
)
from sar_pcp.buffers import Snapshot, SnapshotPair
from sar_pcp.cpu import export_cpu
from sar_pcp.network import export_net_dev, export_net_edev
from sar_pcp.records import (
    CpuStats,
    IoStats,
    IrqStats,
    KtablesStats,
    MemoryStats,
    NetDevStats,
    NetEdevStats,
    NfsdStats,
    NfsStats,
    PagingStats,
    PcswStats,
    QueueStats,
    SerialStats,
    StatsRecord,
    SwapStats,
)
from sar_pcp.serial import export_serial
from sar_pcp.sink import MetricSink

log = structlog.get_logger()


class UnknownActivityError(ValueError):
    """Raised when an activity name is not in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown activity: {name!r}. Valid activities: {list(ACTIVITY_NAMES)}")


@dataclass(frozen=True)
class ExportOptions:
    """Explicit per-pass configuration handed to the exporters."""

    activities: tuple[str, ...] | None = None  # None = all
    cpu_visible: Callable[[int], bool] | None = None
    interface_visible: Callable[[str], bool] | None = None
    memory: MemoryOptions = field(default_factory=MemoryOptions)
    nr_cpu_ini: int | None = None  # CPU positions including "all"

    def enabled(self, name: str) -> bool:
        return self.activities is None or name in self.activities


# Runner signature: (current, previous, interval, sink, options) -> values emitted
Runner = Callable[[Snapshot, Snapshot, int, MetricSink, ExportOptions], int]


@dataclass(frozen=True)
class Activity:
    """One statistics category."""

    name: str
    record_type: type[StatsRecord]
    multi: bool  # True if a sample holds one record per entity
    run: Runner


def _rates(exporter: Callable) -> Runner:
    def run(current, previous, interval, sink, options):
        return exporter(current.first(), previous.first(), interval, sink)

    return run


def _gauges(exporter: Callable) -> Runner:
    def run(current, previous, interval, sink, options):
        return exporter(current.first(), sink)

    return run


def _run_cpu(current, previous, interval, sink, options):
    return export_cpu(
        current.records,
        previous.records,
        sink,
        nr_ini=options.nr_cpu_ini,
        visible=options.cpu_visible,
    )


def _run_memory(current, previous, interval, sink, options):
    return export_memory(current.first(), sink, options.memory)


def _run_net_dev(current, previous, interval, sink, options):
    return export_net_dev(
        current.records, previous.records, interval, sink, visible=options.interface_visible
    )


def _run_net_edev(current, previous, interval, sink, options):
    return export_net_edev(
        current.records, previous.records, interval, sink, visible=options.interface_visible
    )


def _run_serial(current, previous, interval, sink, options):
    return export_serial(current.records, previous.records, interval, sink)


ACTIVITIES: tuple[Activity, ...] = (
    Activity("cpu", CpuStats, True, _run_cpu),
    Activity("pcsw", PcswStats, False, _rates(export_pcsw)),
    Activity("irq", IrqStats, False, _rates(export_irq)),
    Activity("swap", SwapStats, False, _rates(export_swap)),
    Activity("paging", PagingStats, False, _rates(export_paging)),
    Activity("io", IoStats, False, _rates(export_io)),
    Activity("memory", MemoryStats, False, _run_memory),
    Activity("ktables", KtablesStats, False, _gauges(export_ktables)),
    Activity("queue", QueueStats, False, _gauges(export_queue)),
    Activity("net_dev", NetDevStats, True, _run_net_dev),
    Activity("net_edev", NetEdevStats, True, _run_net_edev),
    Activity("serial", SerialStats, True, _run_serial),
    Activity("nfs", NfsStats, False, _rates(export_nfs)),
    Activity("nfsd", NfsdStats, False, _rates(export_nfsd)),
)

ACTIVITY_NAMES: tuple[str, ...] = tuple(a.name for a in ACTIVITIES)

_BY_NAME = {a.name: a for a in ACTIVITIES}


def get_activity(name: str) -> Activity:
    """Return a registered activity.

    Raises:
        UnknownActivityError: If name is not registered.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownActivityError(name) from None


def validate_activities(names: Iterable[str]) -> tuple[str, ...]:
    """Return names as a tuple, raising UnknownActivityError on the first bad one."""
    result = tuple(names)
    for name in result:
        get_activity(name)
    return result


@dataclass
class ExportSummary:
    """Values emitted by one export pass, per activity."""

    interval: int
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


class StatsExporter:
    """Owns the double-buffered snapshots of every activity and exports them.

    The collector pushes one sample per activity per period, then calls
    export() with the elapsed interval.
    """

    def __init__(self, sink: MetricSink, options: ExportOptions | None = None) -> None:
        self.sink = sink
        self.options = options or ExportOptions()
        if self.options.activities is not None:
            validate_activities(self.options.activities)
        self._pairs: dict[str, SnapshotPair] = {a.name: SnapshotPair() for a in ACTIVITIES}

    def pair(self, name: str) -> SnapshotPair:
        """Return the snapshot pair of an activity."""
        get_activity(name)
        return self._pairs[name]

    def push(self, name: str, records: StatsRecord | Iterable[StatsRecord]) -> None:
        """Store a new sample for one activity.

        Global activities accept a single record; per-entity activities
        accept an iterable of records.

        Raises:
            UnknownActivityError: If name is not registered.
            TypeError: If a record has the wrong type for the activity.
        """
        activity = get_activity(name)
        items = [records] if isinstance(records, StatsRecord) else list(records)
        for item in items:
            if not isinstance(item, activity.record_type):
                raise TypeError(
                    f"{name} expects {activity.record_type.__name__}, got {type(item).__name__}"
                )
        self._pairs[name].push(items)

    def export(self, interval: int) -> ExportSummary:
        """Run one export pass over every enabled activity with a current sample.

        Args:
            interval: Time elapsed since the previous sample, in 1/100 s
        """
        summary = ExportSummary(interval=interval)
        for activity in ACTIVITIES:
            if not self.options.enabled(activity.name):
                continue
            pair = self._pairs[activity.name]
            if not pair.has_current or pair.current.is_empty:
                continue
            summary.counts[activity.name] = activity.run(
                pair.current, pair.previous, interval, self.sink, self.options
            )

        log.debug("export_pass", interval=interval, total=summary.total, counts=summary.counts)
        return summary
