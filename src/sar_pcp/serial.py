"""Serial line statistics export."""

from collections.abc import Sequence

from sar_pcp.deltas import HZ_SCALE, rate
from sar_pcp.reconcile import reconcile_serial
from sar_pcp.records import SerialStats
from sar_pcp.sink import MetricSink, format_float

_SERIAL_METRICS = (
    ("serial.in.interrupts", "rx"),
    ("serial.out.interrupts", "tx"),
    ("serial.frame", "frame"),
    ("serial.parity", "parity"),
    ("serial.breaks", "brk"),
    ("serial.overrun", "overrun"),
)


def export_serial(
    current: Sequence[SerialStats],
    previous: Sequence[SerialStats],
    interval: int,
    sink: MetricSink,
) -> int:
    """Export interrupt and error rates for serial lines seen in both samples.

    A line with no previous record (hot-plugged, or the first period) emits
    nothing until it has one.

    Returns:
        Number of values emitted.
    """
    emitted = 0
    for ssc, ssp in reconcile_serial(current, previous):
        instance = f"serial{ssc.line}"
        for name, field in _SERIAL_METRICS:
            value = rate(getattr(ssp, field), getattr(ssc, field), interval, HZ_SCALE)
            sink.put_value(name, instance, format_float(value))
        emitted += len(_SERIAL_METRICS)
    return emitted
