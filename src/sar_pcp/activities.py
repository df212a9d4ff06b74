"""Exporters for the single-record (global) statistics categories.

Rate categories compare the current record with the previous one; a missing
previous record reads as all zero. Gauge categories (memory, kernel tables,
queue) only look at the current record.
"""

from dataclasses import dataclass
from typing import TypeVar

from sar_pcp.deltas import HZ_SCALE, rate, share_percent
from sar_pcp.records import (
    IoStats,
    IrqStats,
    KtablesStats,
    MemoryStats,
    NfsdStats,
    NfsStats,
    PagingStats,
    PcswStats,
    QueueStats,
    StatsRecord,
    SwapStats,
)
from sar_pcp.sink import MetricSink, format_float, format_int

R = TypeVar("R", bound=StatsRecord)

# (metric name, record field, divisor applied after the rate)
RateTable = tuple[tuple[str, str, int], ...]


def _export_rates(
    table: RateTable,
    current: R,
    previous: R | None,
    interval: int,
    sink: MetricSink,
) -> int:
    prev = previous if previous is not None else type(current).zero()
    for name, field, divisor in table:
        value = rate(getattr(prev, field), getattr(current, field), interval, HZ_SCALE)
        sink.put_value(name, None, format_float(value / divisor))
    return len(table)


PCSW_METRICS: RateTable = (
    ("kernel.all.pswitch", "context_switch", 1),
    ("kernel.all.proc", "processes", 1),
)

IRQ_METRICS: RateTable = (("kernel.all.intr", "irq_nr", 1),)

SWAP_METRICS: RateTable = (
    ("swap.pagesin", "pswpin", 1),
    ("swap.pagesout", "pswpout", 1),
)

PAGING_METRICS: RateTable = (
    ("mem.vmstat.pgpgin", "pgpgin", 1),
    ("mem.vmstat.pgpgout", "pgpgout", 1),
    ("mem.vmstat.pgfault", "pgfault", 1),
    ("mem.vmstat.pgmajfault", "pgmajfault", 1),
    ("mem.vmstat.pgfree", "pgfree", 1),
    ("mem.vmstat.pgscank", "pgscan_kswapd", 1),
    ("mem.vmstat.pgscand", "pgscan_direct", 1),
    ("mem.vmstat.pgsteal", "pgsteal", 1),
)

# Sector counts are halved: two 512-byte sectors per kilobyte
IO_METRICS: RateTable = (
    ("disk.all.total", "dk_drive", 1),
    ("disk.all.read", "dk_drive_rio", 1),
    ("disk.all.write", "dk_drive_wio", 1),
    ("disk.all.discard", "dk_drive_dio", 1),
    ("disk.all.read_bytes", "dk_drive_rblk", 2),
    ("disk.all.write_bytes", "dk_drive_wblk", 2),
    ("disk.all.discard_bytes", "dk_drive_dblk", 2),
)

NFS_METRICS: RateTable = (
    ("network.fs.client.call", "nfs_rpccnt", 1),
    ("network.fs.client.retrans", "nfs_rpcretrans", 1),
    ("network.fs.client.read", "nfs_readcnt", 1),
    ("network.fs.client.write", "nfs_writecnt", 1),
    ("network.fs.client.access", "nfs_accesscnt", 1),
    ("network.fs.client.getattr", "nfs_getattcnt", 1),
)

NFSD_METRICS: RateTable = (
    ("network.fs.server.call", "nfsd_rpccnt", 1),
    ("network.fs.server.badcall", "nfsd_rpcbad", 1),
    ("network.fs.server.packets", "nfsd_netcnt", 1),
    ("network.fs.server.udp", "nfsd_netudpcnt", 1),
    ("network.fs.server.tcp", "nfsd_nettcpcnt", 1),
    ("network.fs.server.hits", "nfsd_rchits", 1),
    ("network.fs.server.misses", "nfsd_rcmisses", 1),
    ("network.fs.server.read", "nfsd_readcnt", 1),
    ("network.fs.server.write", "nfsd_writecnt", 1),
    ("network.fs.server.access", "nfsd_accesscnt", 1),
    ("network.fs.server.getattr", "nfsd_getattcnt", 1),
)


def export_pcsw(
    current: PcswStats, previous: PcswStats | None, interval: int, sink: MetricSink
) -> int:
    """Export task creation and context switch rates."""
    return _export_rates(PCSW_METRICS, current, previous, interval, sink)


def export_irq(current: IrqStats, previous: IrqStats | None, interval: int, sink: MetricSink) -> int:
    """Export the total interrupt rate."""
    return _export_rates(IRQ_METRICS, current, previous, interval, sink)


def export_swap(
    current: SwapStats, previous: SwapStats | None, interval: int, sink: MetricSink
) -> int:
    """Export swap-in/swap-out rates."""
    return _export_rates(SWAP_METRICS, current, previous, interval, sink)


def export_paging(
    current: PagingStats, previous: PagingStats | None, interval: int, sink: MetricSink
) -> int:
    """Export paging rates."""
    return _export_rates(PAGING_METRICS, current, previous, interval, sink)


def export_io(current: IoStats, previous: IoStats | None, interval: int, sink: MetricSink) -> int:
    """Export transfer rates; *_bytes metrics are in kB/s."""
    return _export_rates(IO_METRICS, current, previous, interval, sink)


def export_nfs(current: NfsStats, previous: NfsStats | None, interval: int, sink: MetricSink) -> int:
    """Export NFS client RPC rates."""
    return _export_rates(NFS_METRICS, current, previous, interval, sink)


def export_nfsd(
    current: NfsdStats, previous: NfsdStats | None, interval: int, sink: MetricSink
) -> int:
    """Export NFS server RPC rates."""
    return _export_rates(NFSD_METRICS, current, previous, interval, sink)


# ─────────────────────────────────────────────────────────────────────────────
# Gauges
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MemoryOptions:
    """Which memory fields to export.

    extended adds the detailed fields (anon pages, slab, kernel stack, page
    tables, used virtual memory) and only applies when show_memory is set.
    """

    show_memory: bool = True
    show_swap: bool = True
    extended: bool = False


def export_memory(
    current: MemoryStats,
    sink: MetricSink,
    options: MemoryOptions | None = None,
) -> int:
    """Export memory and swap utilization gauges.

    Returns:
        Number of values emitted.
    """
    options = options or MemoryOptions()
    smc = current
    emitted = 0

    if options.show_memory:
        nousedmem = smc.frmkb + smc.bufkb + smc.camkb + smc.slabkb
        if nousedmem > smc.tlmkb:
            nousedmem = smc.tlmkb

        values = [
            ("mem.util.free", format_int(smc.frmkb)),
            ("mem.util.available", format_int(smc.availablekb)),
            ("mem.util.used", format_int(smc.tlmkb - nousedmem)),
            ("mem.util.used_pct", format_float(share_percent(nousedmem, smc.tlmkb))),
            ("mem.util.buffers", format_int(smc.bufkb)),
            ("mem.util.cached", format_int(smc.camkb)),
            ("mem.util.commit", format_int(smc.comkb)),
            (
                "mem.util.commit_pct",
                format_float(share_percent(smc.comkb, smc.tlmkb + smc.tlskb)),
            ),
            ("mem.util.active", format_int(smc.activekb)),
            ("mem.util.inactive", format_int(smc.inactkb)),
            ("mem.util.dirty", format_int(smc.dirtykb)),
        ]
        if options.extended:
            values += [
                ("mem.util.anonpages", format_int(smc.anonpgkb)),
                ("mem.util.slab", format_int(smc.slabkb)),
                ("mem.util.stack", format_int(smc.kstackkb)),
                ("mem.util.pageTables", format_int(smc.pgtblkb)),
                ("mem.util.vmused", format_int(smc.vmusedkb)),
            ]
        for name, value in values:
            sink.put_value(name, None, value)
        emitted += len(values)

    if options.show_swap:
        swap_used = smc.tlskb - smc.frskb
        values = [
            ("mem.util.swapFree", format_int(smc.frskb)),
            ("mem.util.swapUsed", format_int(swap_used)),
            ("mem.util.swapUsed_pct", format_float(share_percent(swap_used, smc.tlskb))),
            ("mem.util.swapCached", format_int(smc.caskb)),
            ("mem.util.swapCached_pct", format_float(share_percent(smc.caskb, swap_used))),
        ]
        for name, value in values:
            sink.put_value(name, None, value)
        emitted += len(values)

    return emitted


def export_ktables(current: KtablesStats, sink: MetricSink) -> int:
    """Export kernel table usage gauges."""
    values = (
        ("vfs.dentry.count", current.dentry_stat),
        ("vfs.files.count", current.file_used),
        ("vfs.inodes.count", current.inode_used),
        ("kernel.all.pty", current.pty_nr),
    )
    for name, value in values:
        sink.put_value(name, None, format_int(value))
    return len(values)


def export_queue(current: QueueStats, sink: MetricSink) -> int:
    """Export run queue sizes and load averages."""
    sink.put_value("proc.runq.runnable", None, format_int(current.nr_running))
    sink.put_value("proc.nprocs", None, format_int(current.nr_threads))
    sink.put_value("proc.blocked", None, format_int(current.procs_blocked))

    # Load averages are stored as fixed-point values multiplied by 100
    sink.put_value("kernel.all.load", "1 min", format_float(current.load_avg_1 / 100))
    sink.put_value("kernel.all.load", "5 min", format_float(current.load_avg_5 / 100))
    sink.put_value("kernel.all.load", "15 min", format_float(current.load_avg_15 / 100))
    return 6
