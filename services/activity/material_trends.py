"""
Material Trend Builder
======================

Cumulative count of published materials over time, filtered by material
type or category. Unlike the individual activity series, each point carries
the running total since the window start.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional, Tuple
import logging
import math

from models.common import Granularity
from models.domain.shared_store import Material
from models.responses import MaterialTrendPoint
from services.activity.repository import ActivityRepository
from services.activity.time_window import (
    format_local_date,
    iter_local_dates,
    local_date_of_days_ago,
    local_day_start_utc,
    local_month_bounds,
    local_today,
    local_week_bounds,
    to_local_date,
)

logger = logging.getLogger(__name__)

DEFAULT_TREND_DAYS = 30


def _created_local_dates(repo: ActivityRepository, criterion: Any, start: date, end_exclusive: date) -> List[date]:
    rows = repo.range_query(
        [Material.created_at],
        Material.created_at,
        local_day_start_utc(start),
        local_day_start_utc(end_exclusive),
        criterion,
        Material.is_published.is_(True),
        end_exclusive=True
    )
    return [to_local_date(row.created_at) for row in rows]


def _cumulative(buckets: Iterable[Tuple[date, int]]) -> List[MaterialTrendPoint]:
    points = []
    running_total = 0
    for bucket_start, count in buckets:
        running_total += count
        points.append(MaterialTrendPoint(date=format_local_date(bucket_start), count=running_total))
    return points


def build_material_trend(
    repo: ActivityRepository,
    criterion: Any,
    days: int = DEFAULT_TREND_DAYS,
    granularity: Granularity = Granularity.DAILY,
    now: Optional[datetime] = None
) -> List[MaterialTrendPoint]:
    """
    Running totals of published materials matching ``criterion``.

    Args:
        repo: Repository over both stores
        criterion: SQLAlchemy filter on Material (type or category)
        days: Look-back in days
        granularity: daily (days + 1 points), weekly (ceil(days / 7) points)
            or monthly (ceil(days / 30) calendar months ending this month)
        now: Reference instant (defaults to the current time)

    Returns:
        Points oldest first; counts never decrease
    """
    granularity = Granularity(granularity)
    today = local_today(now)

    if granularity == Granularity.MONTHLY:
        months = [local_month_bounds(months_ago, today) for months_ago in range(math.ceil(days / 30) - 1, -1, -1)]
        if not months:
            return []
        created = _created_local_dates(repo, criterion, months[0][0], months[-1][1])
        buckets = [
            (month_start, sum(1 for day in created if month_start <= day < month_end))
            for month_start, month_end in months
        ]
        return _cumulative(buckets)

    window_start = local_date_of_days_ago(days, now)

    if granularity == Granularity.WEEKLY:
        weeks = [local_week_bounds(week_index, window_start) for week_index in range(math.ceil(days / 7))]
        if not weeks:
            return []
        created = _created_local_dates(repo, criterion, weeks[0][0], weeks[-1][1])
        buckets = [
            (week_start, sum(1 for day in created if week_start <= day < week_end))
            for week_start, week_end in weeks
        ]
        return _cumulative(buckets)

    created_per_day = Counter(_created_local_dates(repo, criterion, window_start, today + timedelta(days=1)))
    return _cumulative((day, created_per_day.get(day, 0)) for day in iter_local_dates(window_start, today))


def build_type_trend(repo: ActivityRepository, material_type: str, days: int = DEFAULT_TREND_DAYS,
                     granularity: Granularity = Granularity.DAILY,
                     now: Optional[datetime] = None) -> List[MaterialTrendPoint]:
    """Cumulative published materials of one type."""
    return build_material_trend(repo, Material.type == material_type, days, granularity, now)


def build_category_trend(repo: ActivityRepository, category_id: str, days: int = DEFAULT_TREND_DAYS,
                         granularity: Granularity = Granularity.DAILY,
                         now: Optional[datetime] = None) -> List[MaterialTrendPoint]:
    """Cumulative published materials in one category."""
    return build_material_trend(repo, Material.category_id == category_id, days, granularity, now)
