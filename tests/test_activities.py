"""Tests for global activity exporters."""

from sar_pcp.activities import (
    IO_METRICS,
    NFSD_METRICS,
    PAGING_METRICS,
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
    SwapStats,
)
from sar_pcp.sink import ListSink


class TestRateExporters:
    """Tests for the rate-based global exporters."""

    def test_pcsw(self, sink: ListSink):
        """Context switches and forks are per-second rates."""
        prev = PcswStats(context_switch=1000, processes=10)
        curr = PcswStats(context_switch=1500, processes=30)

        assert export_pcsw(curr, prev, 200, sink) == 2
        assert sink.value("kernel.all.pswitch") == "250.000000"
        assert sink.value("kernel.all.proc") == "10.000000"

    def test_missing_previous_reads_as_zero(self, sink: ListSink):
        """On the first period counters are compared to zero."""
        export_irq(IrqStats(irq_nr=300), None, 100, sink)
        assert sink.value("kernel.all.intr") == "300.000000"

    def test_counter_regression(self, sink: ListSink):
        """A counter going backwards reports 0."""
        export_swap(SwapStats(pswpin=5, pswpout=50), SwapStats(pswpin=10, pswpout=0), 100, sink)
        assert sink.value("swap.pagesin") == "0.000000"
        assert sink.value("swap.pagesout") == "50.000000"

    def test_io_sectors_to_kilobytes(self, sink: ListSink):
        """Sector rates are halved into kB/s."""
        export_io(IoStats(dk_drive=8, dk_drive_rblk=400), IoStats(), 100, sink)
        assert sink.value("disk.all.total") == "8.000000"
        assert sink.value("disk.all.read_bytes") == "200.000000"
        assert len(sink) == len(IO_METRICS)

    def test_paging_emits_every_metric(self, sink: ListSink):
        """Every paging metric is emitted, in table order."""
        export_paging(PagingStats(pgfault=100), PagingStats(), 100, sink)
        assert sink.names() == [name for name, _, _ in PAGING_METRICS]
        assert sink.value("mem.vmstat.pgfault") == "100.000000"

    def test_nfs(self, sink: ListSink):
        """NFS client calls are per-second rates."""
        export_nfs(NfsStats(nfs_rpccnt=20), NfsStats(nfs_rpccnt=10), 1000, sink)
        assert sink.value("network.fs.client.call") == "1.000000"

    def test_nfsd(self, sink: ListSink):
        """NFS server export covers every server metric."""
        assert export_nfsd(NfsdStats(nfsd_rchits=5), None, 100, sink) == len(NFSD_METRICS)
        assert sink.value("network.fs.server.hits") == "5.000000"

    def test_zero_interval(self, sink: ListSink):
        """A zero interval yields zero rates."""
        export_pcsw(PcswStats(context_switch=500), None, 0, sink)
        assert sink.value("kernel.all.pswitch") == "0.000000"


class TestExportMemory:
    """Tests for export_memory()."""

    def test_unused_memory_clamped_to_total(self, sink: ListSink):
        """free + buffers + cached + slab is capped at total memory."""
        smc = MemoryStats(tlmkb=100, frmkb=50, bufkb=50, camkb=50, slabkb=200)

        export_memory(smc, sink)

        assert sink.value("mem.util.used") == "0"
        assert sink.value("mem.util.used_pct") == "100.000000"

    def test_gauges(self, sink: ListSink):
        """Memory sizes are emitted as integers in kB."""
        smc = MemoryStats(tlmkb=1000, frmkb=200, bufkb=100, camkb=300, availablekb=450)

        export_memory(smc, sink)

        assert sink.value("mem.util.free") == "200"
        assert sink.value("mem.util.available") == "450"
        assert sink.value("mem.util.used") == "400"
        assert sink.value("mem.util.cached") == "300"

    def test_commit_pct_includes_swap(self, sink: ListSink):
        """Committed memory is a share of memory plus swap."""
        export_memory(MemoryStats(comkb=550, tlmkb=1000, tlskb=100), sink)
        assert sink.value("mem.util.commit") == "550"
        assert sink.value("mem.util.commit_pct") == "50.000000"

    def test_swap(self, sink: ListSink):
        """Swap usage and cached swap percentages."""
        export_memory(MemoryStats(tlskb=100, frskb=60, caskb=10), sink)
        assert sink.value("mem.util.swapFree") == "60"
        assert sink.value("mem.util.swapUsed") == "40"
        assert sink.value("mem.util.swapUsed_pct") == "40.000000"
        assert sink.value("mem.util.swapCached_pct") == "25.000000"

    def test_zero_totals(self, sink: ListSink):
        """Percentages are 0 when the totals are 0."""
        export_memory(MemoryStats(), sink)
        assert sink.value("mem.util.used_pct") == "0.000000"
        assert sink.value("mem.util.commit_pct") == "0.000000"
        assert sink.value("mem.util.swapUsed_pct") == "0.000000"
        assert sink.value("mem.util.swapCached_pct") == "0.000000"

    def test_field_selection(self, sink: ListSink):
        """Options decide which groups of fields are emitted."""
        smc = MemoryStats(tlmkb=100)
        assert export_memory(smc, sink) == 16
        sink.clear()
        assert export_memory(smc, sink, MemoryOptions(extended=True)) == 21
        assert "mem.util.pageTables" in sink.names()
        sink.clear()
        assert export_memory(smc, sink, MemoryOptions(show_memory=False)) == 5
        assert all(name.startswith("mem.util.swap") for name in sink.names())
        sink.clear()
        assert export_memory(smc, sink, MemoryOptions(show_swap=False)) == 11


def test_ktables(sink: ListSink):
    """Kernel table sizes are integer gauges."""
    stats = KtablesStats(dentry_stat=10, file_used=20, inode_used=30, pty_nr=2)
    assert export_ktables(stats, sink) == 4
    assert sink.value("vfs.files.count") == "20"
    assert sink.value("kernel.all.pty") == "2"


def test_queue(sink: ListSink):
    """Load averages are fixed-point values divided by 100."""
    stats = QueueStats(nr_running=3, nr_threads=400, load_avg_1=125, load_avg_5=50)

    assert export_queue(stats, sink) == 6
    assert sink.value("proc.runq.runnable") == "3"
    assert sink.value("kernel.all.load", "1 min") == "1.250000"
    assert sink.value("kernel.all.load", "5 min") == "0.500000"
    assert sink.value("kernel.all.load", "15 min") == "0.000000"
