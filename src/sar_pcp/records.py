"""Raw counter records, one type per statistics category.

Field names follow the sysstat structures they are read from. Every record is
immutable; the all-zero instance returned by ``zero()`` stands in for a
previous sample that does not exist.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, TypeVar

R = TypeVar("R", bound="StatsRecord")


@dataclass(frozen=True, slots=True)
class StatsRecord:
    """Base class for all counter records."""

    # Identity field for per-entity records (None for global records)
    key_field: ClassVar[str | None] = None

    @classmethod
    def zero(cls: type[R]) -> R:
        """Return the all-zero sentinel record."""
        return cls()

    @property
    def key(self) -> Any:
        """Return the entity identity key, or None for global records."""
        if self.key_field is None:
            return None
        return getattr(self, self.key_field)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls: type[R], data: dict) -> R:
        """Deserialize from a dictionary.

        Missing counters default to zero. Unknown keys are rejected so that a
        misspelled field does not silently read as zero.

        Raises:
            ValueError: On unknown keys, non-numeric counter values or
                non-string names.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} fields: {sorted(unknown)}")

        values: dict[str, Any] = {}
        for name, value in data.items():
            if known[name].type in (str, "str"):
                if not isinstance(value, str):
                    raise ValueError(f"{cls.__name__}.{name} must be a string, got {value!r}")
                values[name] = value
            elif isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{cls.__name__}.{name} must be an integer, got {value!r}")
            else:
                values[name] = value
        return cls(**values)


# ─────────────────────────────────────────────────────────────────────────────
# CPU
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CpuStats(StatsRecord):
    """Cumulative CPU ticks (jiffies) for one CPU or the "all" aggregate.

    user and nice already include guest and guest_nice respectively.
    """

    user: int = 0
    nice: int = 0
    sys: int = 0
    idle: int = 0
    iowait: int = 0
    steal: int = 0
    hardirq: int = 0
    softirq: int = 0
    guest: int = 0
    guest_nice: int = 0

    @property
    def total(self) -> int:
        """Total ticks (guest time is already counted in user/nice)."""
        return (
            self.user
            + self.nice
            + self.sys
            + self.idle
            + self.iowait
            + self.steal
            + self.hardirq
            + self.softirq
        )


# ─────────────────────────────────────────────────────────────────────────────
# Global (single-record) categories
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PcswStats(StatsRecord):
    """Task creation and context switches."""

    context_switch: int = 0
    processes: int = 0


@dataclass(frozen=True, slots=True)
class IrqStats(StatsRecord):
    """Total interrupts."""

    irq_nr: int = 0


@dataclass(frozen=True, slots=True)
class SwapStats(StatsRecord):
    """Pages swapped in and out."""

    pswpin: int = 0
    pswpout: int = 0


@dataclass(frozen=True, slots=True)
class PagingStats(StatsRecord):
    """Paging activity counters."""

    pgpgin: int = 0
    pgpgout: int = 0
    pgfault: int = 0
    pgmajfault: int = 0
    pgfree: int = 0
    pgscan_kswapd: int = 0
    pgscan_direct: int = 0
    pgsteal: int = 0


@dataclass(frozen=True, slots=True)
class IoStats(StatsRecord):
    """Block I/O transfers. The *blk fields count 512-byte sectors."""

    dk_drive: int = 0
    dk_drive_rio: int = 0
    dk_drive_wio: int = 0
    dk_drive_dio: int = 0
    dk_drive_rblk: int = 0
    dk_drive_wblk: int = 0
    dk_drive_dblk: int = 0


@dataclass(frozen=True, slots=True)
class MemoryStats(StatsRecord):
    """Memory and swap utilization, all values in kB."""

    frmkb: int = 0  # Free
    availablekb: int = 0
    bufkb: int = 0  # Buffers
    camkb: int = 0  # Cached
    comkb: int = 0  # Committed_AS
    activekb: int = 0
    inactkb: int = 0
    dirtykb: int = 0
    anonpgkb: int = 0
    slabkb: int = 0
    kstackkb: int = 0
    pgtblkb: int = 0
    vmusedkb: int = 0
    tlmkb: int = 0  # Total memory
    frskb: int = 0  # Free swap
    tlskb: int = 0  # Total swap
    caskb: int = 0  # Swap cached


@dataclass(frozen=True, slots=True)
class KtablesStats(StatsRecord):
    """Kernel table usage."""

    dentry_stat: int = 0
    file_used: int = 0
    inode_used: int = 0
    pty_nr: int = 0


@dataclass(frozen=True, slots=True)
class QueueStats(StatsRecord):
    """Run queue and load averages (load_avg_* are fixed-point, x100)."""

    nr_running: int = 0
    nr_threads: int = 0
    procs_blocked: int = 0
    load_avg_1: int = 0
    load_avg_5: int = 0
    load_avg_15: int = 0


@dataclass(frozen=True, slots=True)
class NfsStats(StatsRecord):
    """NFS client RPC activity."""

    nfs_rpccnt: int = 0
    nfs_rpcretrans: int = 0
    nfs_readcnt: int = 0
    nfs_writecnt: int = 0
    nfs_accesscnt: int = 0
    nfs_getattcnt: int = 0


@dataclass(frozen=True, slots=True)
class NfsdStats(StatsRecord):
    """NFS server RPC activity."""

    nfsd_rpccnt: int = 0
    nfsd_rpcbad: int = 0
    nfsd_netcnt: int = 0
    nfsd_netudpcnt: int = 0
    nfsd_nettcpcnt: int = 0
    nfsd_rchits: int = 0
    nfsd_rcmisses: int = 0
    nfsd_readcnt: int = 0
    nfsd_writecnt: int = 0
    nfsd_accesscnt: int = 0
    nfsd_getattcnt: int = 0


# ─────────────────────────────────────────────────────────────────────────────
# Per-device categories
# ─────────────────────────────────────────────────────────────────────────────

DUPLEX_UNKNOWN = 0
DUPLEX_HALF = 1
DUPLEX_FULL = 2


@dataclass(frozen=True, slots=True)
class NetDevStats(StatsRecord):
    """Network interface traffic. speed is in Mbit/s (0 if unknown)."""

    key_field: ClassVar[str | None] = "interface"

    interface: str = ""
    rx_packets: int = 0
    tx_packets: int = 0
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_compressed: int = 0
    tx_compressed: int = 0
    multicast: int = 0
    speed: int = 0
    duplex: int = DUPLEX_UNKNOWN


@dataclass(frozen=True, slots=True)
class NetEdevStats(StatsRecord):
    """Network interface errors."""

    key_field: ClassVar[str | None] = "interface"

    interface: str = ""
    collisions: int = 0
    rx_errors: int = 0
    tx_errors: int = 0
    rx_dropped: int = 0
    tx_dropped: int = 0
    rx_fifo_errors: int = 0
    tx_fifo_errors: int = 0
    rx_frame_errors: int = 0
    tx_carrier_errors: int = 0


@dataclass(frozen=True, slots=True)
class SerialStats(StatsRecord):
    """Serial line interrupts and errors."""

    key_field: ClassVar[str | None] = "line"

    line: int = 0
    rx: int = 0
    tx: int = 0
    frame: int = 0
    parity: int = 0
    brk: int = 0
    overrun: int = 0
