"""Network interface traffic and error export."""

from collections.abc import Callable, Sequence

from sar_pcp.deltas import HZ_SCALE, rate
from sar_pcp.reconcile import InterfaceMatch, reconcile_interfaces
from sar_pcp.records import DUPLEX_FULL, NetDevStats, NetEdevStats
from sar_pcp.sink import MetricSink, format_float

IfutilFn = Callable[[NetDevStats, float, float], float]


def compute_ifutil(record: NetDevStats, rx: float, tx: float) -> float:
    """Return interface utilization as a percentage of its link speed.

    Args:
        record: Current interface record (speed in Mbit/s, duplex mode)
        rx: Received bytes per second
        tx: Transmitted bytes per second

    Returns:
        Utilization percent, or 0.0 when the link speed is unknown.
        Full duplex links are as busy as their busiest direction; half duplex
        links share the bandwidth between both directions.
    """
    if not record.speed:
        return 0.0

    speed = record.speed * 1_000_000
    # bytes -> bits (x8), fraction -> percent (x100)
    if record.duplex == DUPLEX_FULL:
        return max(rx, tx) * 800 / speed
    return (rx + tx) * 800 / speed


def _baseline(match: InterfaceMatch) -> NetDevStats | NetEdevStats:
    """Return the record rates are computed against.

    A newly registered interface has no elapsed delta yet, so it is measured
    against itself and every rate comes out as zero.
    """
    return match.current if match.new else match.previous


def export_net_dev(
    current: Sequence[NetDevStats],
    previous: Sequence[NetDevStats],
    interval: int,
    sink: MetricSink,
    *,
    visible: Callable[[str], bool] | None = None,
    ifutil: IfutilFn = compute_ifutil,
) -> int:
    """Export per-interface packet, byte and utilization rates.

    Interfaces seen for the first time report zero rates.

    Returns:
        Number of values emitted.
    """
    emitted = 0
    for match in reconcile_interfaces(current, previous, visible):
        sndc, sndp = match.current, _baseline(match)
        iface = sndc.interface

        rxb = rate(sndp.rx_bytes, sndc.rx_bytes, interval, HZ_SCALE)
        txb = rate(sndp.tx_bytes, sndc.tx_bytes, interval, HZ_SCALE)
        util = ifutil(sndc, rxb, txb)

        values = (
            (
                "network.interface.in.packets",
                rate(sndp.rx_packets, sndc.rx_packets, interval, HZ_SCALE),
            ),
            (
                "network.interface.out.packets",
                rate(sndp.tx_packets, sndc.tx_packets, interval, HZ_SCALE),
            ),
            ("network.interface.in.bytes", rxb / 1024),
            ("network.interface.out.bytes", txb / 1024),
            (
                "network.interface.in.compressed",
                rate(sndp.rx_compressed, sndc.rx_compressed, interval, HZ_SCALE),
            ),
            (
                "network.interface.out.compressed",
                rate(sndp.tx_compressed, sndc.tx_compressed, interval, HZ_SCALE),
            ),
            (
                "network.interface.in.multicast",
                rate(sndp.multicast, sndc.multicast, interval, HZ_SCALE),
            ),
            ("network.interface.util", util),
        )
        for name, value in values:
            sink.put_value(name, iface, format_float(value))
        emitted += len(values)

    return emitted


# metric name -> record field
_EDEV_METRICS = (
    ("network.interface.in.errors", "rx_errors"),
    ("network.interface.out.errors", "tx_errors"),
    ("network.interface.out.collisions", "collisions"),
    ("network.interface.in.drops", "rx_dropped"),
    ("network.interface.out.drops", "tx_dropped"),
    ("network.interface.out.carrier", "tx_carrier_errors"),
    ("network.interface.in.frame", "rx_frame_errors"),
    ("network.interface.in.fifo", "rx_fifo_errors"),
    ("network.interface.out.fifo", "tx_fifo_errors"),
)


def export_net_edev(
    current: Sequence[NetEdevStats],
    previous: Sequence[NetEdevStats],
    interval: int,
    sink: MetricSink,
    *,
    visible: Callable[[str], bool] | None = None,
) -> int:
    """Export per-interface error, drop and collision rates.

    Returns:
        Number of values emitted.
    """
    emitted = 0
    for match in reconcile_interfaces(current, previous, visible):
        snedc, snedp = match.current, _baseline(match)
        for name, field in _EDEV_METRICS:
            value = rate(getattr(snedp, field), getattr(snedc, field), interval, HZ_SCALE)
            sink.put_value(name, snedc.interface, format_float(value))
        emitted += len(_EDEV_METRICS)
    return emitted
