"""
Temporal Utilities
==================
Date parsing and day-count conversions used by every other component.

The reference date is always passed in explicitly; only
as_reference_date() falls back to today, for the CLI and engine edges.
Bad or missing dates never raise: they become the FAR_FUTURE_DAYS
sentinel (or None for contact recency).
"""

import math
from datetime import date
from typing import Any, Optional

import pandas as pd

from .constants import FAR_FUTURE_DAYS

SECONDS_PER_DAY = 24 * 60 * 60


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a date-like value into a naive timestamp.

    Accepts ISO strings, ``date``/``datetime`` objects and pandas
    timestamps. Timezone-aware values are converted to UTC before the
    timezone is dropped, so every timestamp compares on the same clock.

    Returns None for missing or unparseable input, including
    collections of dates.
    """
    if isinstance(value, (bool, list, tuple, set, dict)):
        return None
    if value is None or value == "":
        return None

    try:
        ts = pd.to_datetime(value, errors='coerce')
    except (TypeError, ValueError):
        return None

    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts


def _difference_in_days(later: pd.Timestamp, earlier: pd.Timestamp) -> int:
    seconds = (later - earlier).total_seconds()
    return int(math.ceil(seconds / SECONDS_PER_DAY))


def days_until(target: Any, reference: Any) -> int:
    """
    Whole days from ``reference`` until ``target``, rounded up.

    Negative when the target is already past. Returns FAR_FUTURE_DAYS
    when either date is missing or invalid.

    Examples
    --------
    >>> days_until("2026-02-04", date(2026, 2, 1))
    3
    >>> days_until(None, date(2026, 2, 1))
    999
    """
    target_ts = parse_date(target)
    reference_ts = parse_date(reference)
    if target_ts is None or reference_ts is None:
        return FAR_FUTURE_DAYS
    return _difference_in_days(target_ts, reference_ts)


def days_since(past: Any, reference: Any) -> Optional[int]:
    """Whole days elapsed from ``past`` to ``reference``, rounded up; None if unknown."""
    past_ts = parse_date(past)
    reference_ts = parse_date(reference)
    if past_ts is None or reference_ts is None:
        return None
    return _difference_in_days(reference_ts, past_ts)


def to_iso_date(value: Any) -> Optional[str]:
    """Render a date-like value as YYYY-MM-DD (None if unparseable)."""
    ts = parse_date(value)
    if ts is None:
        return None
    return ts.strftime('%Y-%m-%d')


def as_reference_date(value: Optional[Any] = None) -> pd.Timestamp:
    """
    Resolve a reference date argument.

    Callers at the outer edge (CLI, engine construction) may pass None
    to mean "today"; analytic functions always receive the resolved value.
    """
    if value is None:
        return pd.Timestamp(date.today())
    ts = parse_date(value)
    if ts is None:
        raise ValueError(f"Invalid reference date: {value!r}")
    return ts


__all__ = [
    'parse_date',
    'days_until',
    'days_since',
    'to_iso_date',
    'as_reference_date',
    'FAR_FUTURE_DAYS',
]
