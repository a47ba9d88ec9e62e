from __future__ import annotations

import math

import pandas as pd

ONE_DAY = pd.Timedelta(days=1)


def to_timestamp(value) -> pd.Timestamp:
    """
    Coerce a date-like value to a tz-naive pd.Timestamp.

    Aware timestamps are converted to UTC first so that every comparison in the
    engine happens on the same (UTC) calendar.
    """
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        raise ValueError(f"Not a valid date: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def to_date(value) -> pd.Timestamp:
    """Calendar date (midnight) of a date-like value."""
    return to_timestamp(value).normalize()


def add_months(date, months: int) -> pd.Timestamp:
    """
    Month-safe shift by `months` calendar months.

    Day-of-month is preserved and clamped to the last valid day of the target
    month: 31-Jan + 6M -> 31-Jul, 31-Mar - 6M -> 30-Sep, 31-Aug + 6M -> 28/29-Feb.
    Any time-of-day is dropped.
    """
    return to_date(date) + pd.DateOffset(months=int(months))


def diff_in_days(later, earlier) -> float:
    """Signed fractional days between two instants (later - earlier)."""
    return (to_timestamp(later) - to_timestamp(earlier)) / ONE_DAY


def whole_days_between(later, earlier) -> int:
    return int(math.floor(diff_in_days(later, earlier)))
