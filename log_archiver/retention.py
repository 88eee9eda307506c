"""Retention window arithmetic."""

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime, str]


def _canonical(value: DateLike) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def cutoff_date(now: Union[date, datetime], retention_days: int) -> date:
    """Date below which files are eligible for archival.

    Day granularity only; the time of day in ``now`` is ignored.
    """
    if retention_days < 0:
        raise ValueError(f"retention_days must be >= 0, got {retention_days}")
    if isinstance(now, datetime):
        now = now.date()
    return now - timedelta(days=retention_days)


def is_eligible(file_date: DateLike, cutoff: DateLike) -> bool:
    """True if file_date is strictly before cutoff.

    Compares zero-padded YYYY-MM-DD strings, which sort the same way as the
    calendar dates they represent.
    """
    return _canonical(file_date) < _canonical(cutoff)
