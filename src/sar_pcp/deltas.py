"""Delta arithmetic for counter snapshots.

Every function here is pure and total: a counter regression or a zero interval
yields 0.0, never a negative value or a ZeroDivisionError.
"""

# Intervals are expressed in hundredths of a second; multiply by this to get
# per-second rates.
HZ_SCALE = 100


def rate(prev: int | float, curr: int | float, interval: int | float, scale: float = 1.0) -> float:
    """Return (curr - prev) / interval, multiplied by scale.

    Args:
        prev: Counter value at the previous sample
        curr: Counter value at the current sample
        interval: Elapsed time between the two samples
        scale: Unit conversion factor (HZ_SCALE for per-second rates)

    Returns:
        The rate, or 0.0 when the counter went backwards or interval <= 0.
    """
    if curr < prev or interval <= 0:
        return 0.0
    return (curr - prev) / interval * scale


def busy_percent(prev_busy: int | float, curr_busy: int | float, total_interval: int | float) -> float:
    """Return the share of total_interval spent in a state, as a percentage."""
    if curr_busy < prev_busy or total_interval <= 0:
        return 0.0
    return (curr_busy - prev_busy) * 100 / total_interval


def share_percent(numerator: int | float, denominator: int | float) -> float:
    """Return numerator as a percentage of denominator (0.0 if denominator is 0)."""
    if not denominator:
        return 0.0
    return numerator * 100 / denominator
