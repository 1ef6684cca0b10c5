"""Period-over-period comparison of snapshot metrics."""
import math
from typing import Dict, Mapping, Optional

CHANGE_SUFFIX = "_change"


def percent_change(current: Optional[float], previous: Optional[float]) -> float:
    """
    Percent change from previous to current.

    A missing or zero baseline yields 0.0 rather than an unbounded value, so a
    jump from nothing is reported as no change.
    """
    if not previous or current is None:
        return 0.0
    change = (float(current) - float(previous)) / float(previous) * 100
    # Non-finite inputs collapse to 0 like an empty baseline
    return change if math.isfinite(change) else 0.0


def compare(current: Mapping[str, float], previous: Mapping[str, float]) -> Dict[str, float]:
    """
    Compute ``<metric>_change`` for every metric of the current period.

    Keys that only exist in ``previous`` are ignored; keys missing from
    ``previous`` compare against 0.
    """
    return {
        f"{metric}{CHANGE_SUFFIX}": percent_change(value, previous.get(metric))
        for metric, value in current.items()
    }
