"""
Exceedance statistics over a measurement series.
"""

from typing import Iterable, Optional, Sequence

import pandas as pd

from .models import ExceedanceStatistics, Measurement


def exceeds(value: Optional[float], limit: Optional[float]) -> bool:
    """True when a value is strictly greater than a defined limit."""
    if value is None or limit is None:
        return False
    return value > limit


def compute_exceedance_statistics(
    measurements: Sequence[Measurement], limit: Optional[float]
) -> ExceedanceStatistics:
    """
    Count measurements strictly above ``limit``.

    The percentage is left undefined (None) when there is no limit or no
    data, so an empty or unlimited series never reads as "0% exceeded".

    Args:
        measurements: Series to analyse.
        limit: Threshold, or None when the parameter has no limit.

    Returns:
        ExceedanceStatistics with the percentage at full precision.
    """
    total = len(measurements)
    if limit is None or total == 0:
        return ExceedanceStatistics(exceedance_count=0, total_count=total, percentage=None)

    count = sum(1 for m in measurements if exceeds(m.value, limit))
    return ExceedanceStatistics(
        exceedance_count=count,
        total_count=total,
        percentage=100.0 * count / total,
    )


def measurements_to_dataframe(
    measurements: Iterable[Measurement], limit: Optional[float] = None
) -> pd.DataFrame:
    """Series as a DataFrame, in series order, with an ``exceeds_limit`` flag."""
    rows = [
        {
            "timestamp": m.timestamp,
            "value": m.value,
            "exceeds_limit": exceeds(m.value, limit),
        }
        for m in measurements
    ]
    df = pd.DataFrame(rows, columns=["timestamp", "value", "exceeds_limit"])
    df["value"] = df["value"].astype("float64")
    df["exceeds_limit"] = df["exceeds_limit"].astype("bool")
    return df
