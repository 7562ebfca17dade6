"""
Internal utility functions for aqmonitor.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional, Union

import pandas as pd

DateLike = Union[date, datetime, str]


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a measurement timestamp as returned by the data source.

    Accepts ``datetime`` and ``date`` objects, ``YYYY-MM-DD`` strings and
    ISO-8601 datetimes (a trailing ``Z`` is read as UTC). Fractional seconds
    of any precision are accepted, as PostgREST returns them for
    ``timestamptz`` columns.

    Raises:
        ValueError: If the value is empty or cannot be parsed.
    """
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if not isinstance(raw, str) or not raw:
        raise ValueError(f"Invalid timestamp: {raw!r}")

    # Handle ISO format with timezone
    if "T" in raw or " " in raw:
        parsed = pd.Timestamp(raw)
        if parsed is pd.NaT:
            raise ValueError(f"Invalid timestamp: {raw!r}")
        return parsed.to_pydatetime()
    return datetime.strptime(raw, "%Y-%m-%d")


def parse_value(raw: Any) -> Optional[float]:
    """Convert a numeric column to float, keeping ``None``."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"Invalid numeric value: {raw!r}")
    return float(raw)


def to_datetime(value: DateLike) -> datetime:
    """Promote a ``date`` to midnight and parse ISO strings."""
    if isinstance(value, (datetime, str)):
        return parse_timestamp(value)
    return datetime(value.year, value.month, value.day)


def to_filter_value(value: Any) -> str:
    """Serialize a filter operand for a REST query string."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def as_utc(value: datetime) -> datetime:
    """
    Make a datetime comparable with any other: naive values are read as UTC,
    aware values are converted to UTC.
    """
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_datetime(value: Any) -> datetime:
    """Parse a date-like value and normalise it with :func:`as_utc`."""
    return as_utc(to_datetime(value))
