"""
Individual Activity Time Series
===============================

Per-user drill-down: scalar totals, a bucketed view/upload series and the
most viewed materials, all scoped to one local-date window.

Granularity is chosen automatically from the window length unless the caller
asks for one. Bucket counts are per bucket, never cumulative.

Uploads are stored with absolute timestamps while views and logins are keyed
by local calendar date, so uploads are fetched by a widened timestamp range,
converted to local dates and re-filtered before being counted.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union
import logging
import math

from models.common import Granularity, PERIOD_DAYS, Period
from models.domain.local_store import LoginEvent
from models.domain.shared_store import Material, MaterialView
from models.responses import ActivityBucket, DailyCount, UserActivityStats
from services.activity.exceptions import InvalidWindowError, UserNotFoundError
from services.activity.rankings import DEFAULT_TOP_MATERIALS, to_material_counts
from services.activity.repository import ActivityRepository
from services.activity.time_window import (
    days_between,
    format_local_date,
    iter_local_dates,
    local_date_of_days_ago,
    local_day_start_utc,
    local_today,
    local_week_bounds,
    next_month_start,
    parse_local_date,
    to_local_date,
)

logger = logging.getLogger(__name__)

DAILY_MAX_SPAN_DAYS = 30
WEEKLY_MAX_SPAN_DAYS = 90
ONE_DAY = timedelta(days=1)

DateInput = Union[str, date, None]


def _coerce_date(value: DateInput, field: str) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        raise TypeError(f"{field} must be a local calendar date, not an absolute instant")
    if isinstance(value, date):
        return value
    if not value.strip():
        return None
    try:
        return parse_local_date(value)
    except ValueError as e:
        raise InvalidWindowError(f"Invalid {field}: expected YYYY-MM-DD") from e


def resolve_window(
    period: Period,
    start_date: DateInput = None,
    end_date: DateInput = None,
    now: Optional[datetime] = None
) -> Tuple[date, date]:
    """
    Resolve the inclusive local-date window for a period.

    Custom periods use the given bounds verbatim; every other period ends
    today and starts a fixed number of days earlier.

    Raises:
        InvalidWindowError: custom period with a missing or malformed bound,
            or start after end
    """
    period = Period(period)
    if period == Period.CUSTOM:
        start = _coerce_date(start_date, "startDate")
        end = _coerce_date(end_date, "endDate")
        if start is None or end is None:
            raise InvalidWindowError(
                "startDate and endDate are required for a custom period",
                start_date=str(start_date) if start_date else None,
                end_date=str(end_date) if end_date else None
            )
        if start > end:
            raise InvalidWindowError(
                "startDate must not be after endDate",
                start_date=format_local_date(start),
                end_date=format_local_date(end)
            )
        return start, end

    return local_date_of_days_ago(PERIOD_DAYS[period], now), local_today(now)


def resolve_granularity(start: date, end: date, explicit: Optional[Granularity] = None) -> Granularity:
    """
    Explicit granularity wins; otherwise pick by span in days.

    span <= 30 -> daily, span <= 90 -> weekly, else monthly.
    """
    if explicit is not None:
        return Granularity(explicit)
    span = days_between(start, end)
    if span <= DAILY_MAX_SPAN_DAYS:
        return Granularity.DAILY
    if span <= WEEKLY_MAX_SPAN_DAYS:
        return Granularity.WEEKLY
    return Granularity.MONTHLY


def upload_local_dates(repo: ActivityRepository, user_sid: str, start: date, end: date) -> List[date]:
    """
    Local dates of the user's published uploads within [start, end].

    The timestamp range is widened by one day on each side and every
    instant is converted to its local date before filtering.
    """
    rows = repo.range_query(
        [Material.created_at],
        Material.created_at,
        local_day_start_utc(start) - ONE_DAY,
        local_day_start_utc(end + ONE_DAY) + ONE_DAY,
        Material.created_by == user_sid,
        Material.is_published.is_(True),
        end_exclusive=True
    )
    local_dates = (to_local_date(row.created_at) for row in rows)
    return [day for day in local_dates if start <= day <= end]


def _view_criteria(user_sid: str, start: date, end: date):
    return (
        MaterialView.user_sid == user_sid,
        MaterialView.view_date >= format_local_date(start),
        MaterialView.view_date <= format_local_date(end),
    )


def build_daily_buckets(repo: ActivityRepository, user_sid: str, start: date, end: date) -> List[ActivityBucket]:
    """One bucket per local date in [start, end]."""
    views = repo.count_grouped_by_date(MaterialView.view_date, *_view_criteria(user_sid, start, end))
    uploads = Counter(format_local_date(day) for day in upload_local_dates(repo, user_sid, start, end))

    bucket_dates = {format_local_date(day) for day in iter_local_dates(start, end)}
    bucket_dates.update(views)
    bucket_dates.update(uploads)

    return [
        ActivityBucket(date=day_str, view_count=views.get(day_str, 0), upload_count=uploads.get(day_str, 0))
        for day_str in sorted(bucket_dates)
    ]


def _ranged_bucket(repo: ActivityRepository, user_sid: str, start: date, end: date) -> ActivityBucket:
    view_count = repo.count_in_range(
        MaterialView.view_date, start, end, MaterialView.user_sid == user_sid
    )
    return ActivityBucket(
        date=format_local_date(start),
        view_count=view_count,
        upload_count=len(upload_local_dates(repo, user_sid, start, end))
    )


def weekly_bucket_bounds(start: date, end: date) -> List[Tuple[date, date]]:
    """
    ceil(window_days / 7) seven-day buckets starting at ``start``.

    Returns inclusive (bucket_start, bucket_end) pairs; the last bucket is
    clipped to ``end``.
    """
    window_days = days_between(start, end) + 1
    bounds = []
    for week_index in range(math.ceil(window_days / 7)):
        bucket_start, bucket_end_exclusive = local_week_bounds(week_index, start)
        bounds.append((bucket_start, min(bucket_end_exclusive - ONE_DAY, end)))
    return bounds


def monthly_bucket_bounds(start: date, end: date) -> List[Tuple[date, date]]:
    """Local calendar months overlapping [start, end], clipped at both ends."""
    bounds = []
    bucket_start = start
    while bucket_start <= end:
        bucket_end = min(next_month_start(bucket_start) - ONE_DAY, end)
        bounds.append((bucket_start, bucket_end))
        bucket_start = bucket_end + ONE_DAY
    return bounds


def build_weekly_buckets(repo: ActivityRepository, user_sid: str, start: date, end: date) -> List[ActivityBucket]:
    return [
        _ranged_bucket(repo, user_sid, bucket_start, bucket_end)
        for bucket_start, bucket_end in weekly_bucket_bounds(start, end)
    ]


def build_monthly_buckets(repo: ActivityRepository, user_sid: str, start: date, end: date) -> List[ActivityBucket]:
    return [
        _ranged_bucket(repo, user_sid, bucket_start, bucket_end)
        for bucket_start, bucket_end in monthly_bucket_bounds(start, end)
    ]


BUCKET_BUILDERS = {
    Granularity.DAILY: build_daily_buckets,
    Granularity.WEEKLY: build_weekly_buckets,
    Granularity.MONTHLY: build_monthly_buckets,
}


def build_individual_stats(
    repo: ActivityRepository,
    user_sid: str,
    period: Period = Period.ONE_MONTH,
    start_date: DateInput = None,
    end_date: DateInput = None,
    granularity: Optional[Granularity] = None,
    top_n: int = DEFAULT_TOP_MATERIALS,
    now: Optional[datetime] = None
) -> UserActivityStats:
    """
    Build one user's activity stats for a period.

    Args:
        repo: Repository over both stores
        user_sid: User to report on (active or not)
        period: Look-back period, or custom with start_date/end_date
        start_date: Window start for custom periods (date or YYYY-MM-DD)
        end_date: Window end for custom periods (date or YYYY-MM-DD)
        granularity: Explicit bucket size; chosen from the window when None
        top_n: Number of most viewed materials to include
        now: Reference instant (defaults to the current time)

    Returns:
        UserActivityStats scoped to the window

    Raises:
        UserNotFoundError: No user row for user_sid
        InvalidWindowError: Custom window cannot be resolved
    """
    start, end = resolve_window(period, start_date, end_date, now)

    user = repo.get_user(user_sid)
    if user is None:
        raise UserNotFoundError(user_sid)

    chosen = resolve_granularity(start, end, granularity)
    view_criteria = _view_criteria(user_sid, start, end)

    login_count = repo.count_in_range(LoginEvent.date, start, end, LoginEvent.user_sid == user_sid)
    active_day_count = repo.count_distinct(
        LoginEvent.date,
        LoginEvent.user_sid == user_sid,
        LoginEvent.date >= format_local_date(start),
        LoginEvent.date <= format_local_date(end)
    )
    view_count = repo.count_all(MaterialView, *view_criteria)
    unique_material_count = repo.count_distinct(MaterialView.material_id, *view_criteria)
    uploaded_material_count = len(upload_local_dates(repo, user_sid, start, end))

    buckets = BUCKET_BUILDERS[chosen](repo, user_sid, start, end)
    daily_series = []
    if chosen == Granularity.DAILY:
        daily_series = [DailyCount(date=bucket.date, count=bucket.view_count) for bucket in buckets]

    top_rows = repo.top_n(
        [MaterialView.material_id, Material.title],
        top_n,
        *view_criteria,
        outerjoin=(Material, Material.id == MaterialView.material_id)
    )

    logger.debug(
        "[TimeSeries] user=%s window=%s..%s granularity=%s buckets=%d",
        user_sid, start, end, chosen.value, len(buckets)
    )
    return UserActivityStats(
        user_sid=user.sid,
        display_name=user.display_name,
        login_count=login_count,
        view_count=view_count,
        unique_material_count=unique_material_count,
        uploaded_material_count=uploaded_material_count,
        active_day_count=active_day_count,
        daily_series=daily_series,
        bucketed_series=buckets,
        top_materials=to_material_counts(top_rows),
    )
