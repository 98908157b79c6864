"""
Local Time Window Utilities
===========================

Calendar helpers for the fixed +09:00 local timezone used by all activity
statistics.

Two kinds of values flow through the analytics code and must never be mixed:
- local calendar dates (``datetime.date``), e.g. material_views.view_date
- absolute instants (``datetime.datetime``, aware or naive UTC), e.g.
  materials.created_at

Every comparison between the two goes through ``to_local_date``. Functions
that take a local date reject a ``datetime`` outright.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Tuple

LOCAL_UTC_OFFSET = timedelta(hours=9)
LOCAL_TIMEZONE = timezone(LOCAL_UTC_OFFSET)
DATE_FORMAT = "%Y-%m-%d"


def ensure_local_date(value: date) -> date:
    """Reject absolute instants where a local calendar date is expected."""
    if isinstance(value, datetime):
        raise TypeError(
            "expected a local calendar date, got an absolute instant; "
            "convert it with to_local_date() first"
        )
    if not isinstance(value, date):
        raise TypeError(f"expected a local calendar date, got {type(value).__name__}")
    return value


def _as_utc(instant: datetime) -> datetime:
    """Naive datetimes are stored as UTC throughout the stores."""
    if not isinstance(instant, datetime):
        raise TypeError(f"expected an absolute instant, got {type(instant).__name__}")
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def local_now(now: Optional[datetime] = None) -> datetime:
    """Get current datetime in the local timezone (UTC+9)"""
    if now is None:
        return datetime.now(LOCAL_TIMEZONE)
    return _as_utc(now).astimezone(LOCAL_TIMEZONE)


def local_today(now: Optional[datetime] = None) -> date:
    """Today's local calendar date, independent of the process clock offset."""
    return local_now(now).date()


def local_date_of_days_ago(days: int, now: Optional[datetime] = None) -> date:
    """
    Local calendar date ``days`` days before today.

    Example: at 2024-03-01T16:30:00Z it is already 2024-03-02 locally, so
    ``local_date_of_days_ago(1)`` is 2024-03-01.
    """
    return local_today(now) - timedelta(days=days)


def to_local_date(instant: datetime) -> date:
    """
    Convert an absolute instant to its local (+09:00) calendar date.

    Example: 2024-03-01T16:30:00Z -> 2024-03-02
    """
    return _as_utc(instant).astimezone(LOCAL_TIMEZONE).date()


def local_day_start_utc(local_date: date) -> datetime:
    """
    Local midnight of ``local_date`` as a naive UTC datetime.

    Used as a bound for queries against absolute-timestamp columns, which
    are stored as naive UTC.
    Example: 2025-01-20 local starts at 2025-01-19 15:00:00 UTC.
    """
    ensure_local_date(local_date)
    local_midnight = datetime(local_date.year, local_date.month, local_date.day, tzinfo=LOCAL_TIMEZONE)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def next_month_start(local_date: date) -> date:
    """First day of the calendar month after the one containing ``local_date``."""
    year, month = _shift_month(local_date.year, local_date.month, 1)
    return date(year, month, 1)


def local_month_bounds(months_ago: int, anchor: Optional[date] = None) -> Tuple[date, date]:
    """
    Local calendar month ``months_ago`` months before the anchor's month.

    Args:
        months_ago: 0 for the anchor's own month, 1 for the previous one, ...
        anchor: Local date inside the reference month (default: local today)

    Returns:
        (start, end_exclusive) local dates
    """
    anchor = ensure_local_date(anchor) if anchor is not None else local_today()
    year, month = _shift_month(anchor.year, anchor.month, -months_ago)
    start = date(year, month, 1)
    return start, next_month_start(start)


def local_week_bounds(week_index: int, anchor_date: date) -> Tuple[date, date]:
    """
    7-day window ``week_index`` weeks after ``anchor_date``.

    Windows start on the anchor's weekday, not on calendar week boundaries.

    Returns:
        (start, end_exclusive) local dates
    """
    ensure_local_date(anchor_date)
    start = anchor_date + timedelta(days=7 * week_index)
    return start, start + timedelta(days=7)


def iter_local_dates(start: date, end: date) -> Iterator[date]:
    """Yield every local date in [start, end] inclusive."""
    ensure_local_date(start)
    ensure_local_date(end)
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end: date) -> int:
    """Number of days from start to end (0 when equal)."""
    return (ensure_local_date(end) - ensure_local_date(start)).days


def parse_local_date(value: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on malformed input."""
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def format_local_date(value: date) -> str:
    """Format a local calendar date as YYYY-MM-DD."""
    return ensure_local_date(value).strftime(DATE_FORMAT)
