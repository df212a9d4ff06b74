"""Fixed catalog of every metric the exporters can emit.

The names are consumed by existing tooling and must stay verbatim. Sinks that
have to declare metrics before receiving values (archive writers) can do so
through define_metrics().
"""

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class MetricDef:
    """Static description of one exported metric."""

    name: str
    activity: str
    indom: str | None  # Instance domain: None, "cpu", "interface", "serial", "loadavg"
    units: str
    semantics: str = "instant"


def _defs(activity: str, indom: str | None, units: str, names: Iterable[str]) -> list[MetricDef]:
    return [MetricDef(name, activity, indom, units) for name in names]


_CPU_FIELDS = (
    "user",
    "nice",
    "sys",
    "idle",
    "iowait",
    "steal",
    "hardirq",
    "softirq",
    "guest",
    "guest_nice",
)

METRICS: tuple[MetricDef, ...] = tuple(
    # CPU
    _defs("cpu", None, "%", (f"kernel.all.cpu.{f}" for f in _CPU_FIELDS))
    + _defs("cpu", "cpu", "%", (f"kernel.percpu.cpu.{f}" for f in _CPU_FIELDS))
    # Task creation and context switches
    + _defs("pcsw", None, "count/s", ("kernel.all.pswitch", "kernel.all.proc"))
    # Interrupts
    + _defs("irq", None, "count/s", ("kernel.all.intr",))
    # Swapping
    + _defs("swap", None, "count/s", ("swap.pagesin", "swap.pagesout"))
    # Paging
    + _defs(
        "paging",
        None,
        "count/s",
        (
            "mem.vmstat.pgpgin",
            "mem.vmstat.pgpgout",
            "mem.vmstat.pgfault",
            "mem.vmstat.pgmajfault",
            "mem.vmstat.pgfree",
            "mem.vmstat.pgscank",
            "mem.vmstat.pgscand",
            "mem.vmstat.pgsteal",
        ),
    )
    # I/O
    + _defs(
        "io",
        None,
        "count/s",
        ("disk.all.total", "disk.all.read", "disk.all.write", "disk.all.discard"),
    )
    + _defs(
        "io",
        None,
        "Kbyte/s",
        ("disk.all.read_bytes", "disk.all.write_bytes", "disk.all.discard_bytes"),
    )
    # Memory
    + _defs(
        "memory",
        None,
        "Kbyte",
        (
            "mem.util.free",
            "mem.util.available",
            "mem.util.used",
            "mem.util.buffers",
            "mem.util.cached",
            "mem.util.commit",
            "mem.util.active",
            "mem.util.inactive",
            "mem.util.dirty",
            "mem.util.anonpages",
            "mem.util.slab",
            "mem.util.stack",
            "mem.util.pageTables",
            "mem.util.vmused",
            "mem.util.swapFree",
            "mem.util.swapUsed",
            "mem.util.swapCached",
        ),
    )
    + _defs(
        "memory",
        None,
        "%",
        (
            "mem.util.used_pct",
            "mem.util.commit_pct",
            "mem.util.swapUsed_pct",
            "mem.util.swapCached_pct",
        ),
    )
    # Kernel tables
    + _defs(
        "ktables",
        None,
        "count",
        ("vfs.dentry.count", "vfs.files.count", "vfs.inodes.count", "kernel.all.pty"),
    )
    # Queue and load
    + _defs("queue", None, "count", ("proc.runq.runnable", "proc.nprocs", "proc.blocked"))
    + _defs("queue", "loadavg", "none", ("kernel.all.load",))
    # Network interfaces
    + _defs(
        "net_dev",
        "interface",
        "count/s",
        (
            "network.interface.in.packets",
            "network.interface.out.packets",
        ),
    )
    + _defs(
        "net_dev",
        "interface",
        "Kbyte/s",
        ("network.interface.in.bytes", "network.interface.out.bytes"),
    )
    + _defs(
        "net_dev",
        "interface",
        "count/s",
        (
            "network.interface.in.compressed",
            "network.interface.out.compressed",
            "network.interface.in.multicast",
        ),
    )
    + _defs("net_dev", "interface", "%", ("network.interface.util",))
    # Network interface errors
    + _defs(
        "net_edev",
        "interface",
        "count/s",
        (
            "network.interface.in.errors",
            "network.interface.out.errors",
            "network.interface.out.collisions",
            "network.interface.in.drops",
            "network.interface.out.drops",
            "network.interface.out.carrier",
            "network.interface.in.frame",
            "network.interface.in.fifo",
            "network.interface.out.fifo",
        ),
    )
    # Serial lines
    + _defs(
        "serial",
        "serial",
        "count/s",
        (
            "serial.in.interrupts",
            "serial.out.interrupts",
            "serial.frame",
            "serial.parity",
            "serial.breaks",
            "serial.overrun",
        ),
    )
    # NFS client
    + _defs(
        "nfs",
        None,
        "count/s",
        (
            "network.fs.client.call",
            "network.fs.client.retrans",
            "network.fs.client.read",
            "network.fs.client.write",
            "network.fs.client.access",
            "network.fs.client.getattr",
        ),
    )
    # NFS server
    + _defs(
        "nfsd",
        None,
        "count/s",
        (
            "network.fs.server.call",
            "network.fs.server.badcall",
            "network.fs.server.packets",
            "network.fs.server.udp",
            "network.fs.server.tcp",
            "network.fs.server.hits",
            "network.fs.server.misses",
            "network.fs.server.read",
            "network.fs.server.write",
            "network.fs.server.access",
            "network.fs.server.getattr",
        ),
    )
)

_BY_NAME: dict[str, MetricDef] = {m.name: m for m in METRICS}


def lookup(name: str) -> MetricDef:
    """Return the definition of a metric.

    Raises:
        KeyError: If name is not a known metric.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown metric: {name!r}") from None


def metrics_for(activity: str) -> list[MetricDef]:
    """Return the metrics of one activity, in catalog order."""
    return [m for m in METRICS if m.activity == activity]


def define_metrics(sink: object, activities: Iterable[str]) -> int:
    """Declare the metrics of the given activities to a sink.

    Sinks without an ``add_metric`` hook are left alone.

    Returns:
        Number of metrics declared.
    """
    add_metric = getattr(sink, "add_metric", None)
    if add_metric is None:
        return 0

    count = 0
    for activity in activities:
        for defn in metrics_for(activity):
            add_metric(defn)
            count += 1
    log.debug("metrics_defined", count=count)
    return count
