"""
Activity Ranking Builder
========================

Per-user activity stats for every active user, ranked by view count.

Each metric is loaded with one grouped query over all users (batched
``IN (...)``), then assembled in memory. Missing metrics default to zero.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging

from models.domain.local_store import LoginEvent
from models.domain.shared_store import Material, MaterialView
from models.responses import DailyCount, MaterialCount, UserActivityStats
from services.activity.repository import ActivityRepository
from services.activity.time_window import (
    format_local_date,
    iter_local_dates,
    local_date_of_days_ago,
    local_today,
)

logger = logging.getLogger(__name__)

DEFAULT_SERIES_DAYS = 30
DEFAULT_TOP_MATERIALS = 10
UNTITLED = "Untitled"


def to_material_counts(rows) -> List[MaterialCount]:
    """Rows with material_id, title and count -> MaterialCount list."""
    return [
        MaterialCount(
            material_id=row.material_id,
            title=row.title or UNTITLED,
            count=int(row.count or 0)
        )
        for row in rows
    ]


def fill_daily_series(counts_by_date: Dict[str, int], start, end) -> List[DailyCount]:
    """One entry per local date in [start, end], zero where nothing was counted."""
    return [
        DailyCount(date=day_str, count=counts_by_date.get(day_str, 0))
        for day_str in (format_local_date(day) for day in iter_local_dates(start, end))
    ]


def build_user_rankings(
    repo: ActivityRepository,
    series_days: int = DEFAULT_SERIES_DAYS,
    top_n: int = DEFAULT_TOP_MATERIALS,
    now: Optional[datetime] = None
) -> List[UserActivityStats]:
    """
    Build activity stats for all active users, sorted by view count (descending).

    Args:
        repo: Repository over both stores
        series_days: Length of the daily view series look-back
        top_n: Materials kept per user in top_materials
        now: Reference instant (defaults to the current time)

    Returns:
        List of UserActivityStats; ties keep user order
    """
    users = repo.list_active_users()
    if not users:
        return []

    user_sids = [user.sid for user in users]
    series_start = local_date_of_days_ago(series_days, now)
    series_end = local_today(now)

    # Shared store: one grouped query per metric
    view_counts = repo.count_grouped_by_user(MaterialView.user_sid, user_sids)
    unique_counts = repo.count_distinct_grouped_by_user(
        MaterialView.material_id, MaterialView.user_sid, user_sids
    )
    upload_counts = repo.count_grouped_by_user(
        Material.created_by, user_sids, Material.is_published.is_(True)
    )
    daily_views = repo.count_grouped_by_user_and_date(
        MaterialView.user_sid,
        MaterialView.view_date,
        user_sids,
        MaterialView.view_date >= format_local_date(series_start),
        MaterialView.view_date <= format_local_date(series_end)
    )
    top_materials = repo.top_n_grouped_by_user(
        MaterialView.user_sid,
        [MaterialView.material_id, Material.title],
        top_n,
        user_sids,
        outerjoin=(Material, Material.id == MaterialView.material_id)
    )

    # Local store
    login_counts = repo.count_grouped_by_user(LoginEvent.user_sid, user_sids)
    active_days = repo.count_distinct_grouped_by_user(LoginEvent.date, LoginEvent.user_sid, user_sids)

    rankings = [
        UserActivityStats(
            user_sid=user.sid,
            display_name=user.display_name,
            login_count=login_counts.get(user.sid, 0),
            view_count=view_counts.get(user.sid, 0),
            unique_material_count=unique_counts.get(user.sid, 0),
            uploaded_material_count=upload_counts.get(user.sid, 0),
            active_day_count=active_days.get(user.sid, 0),
            daily_series=fill_daily_series(daily_views.get(user.sid, {}), series_start, series_end),
            bucketed_series=[],
            top_materials=to_material_counts(top_materials.get(user.sid, [])),
        )
        for user in users
    ]

    rankings.sort(key=lambda stats: stats.view_count, reverse=True)
    logger.debug("[Rankings] Built rankings for %d users", len(rankings))
    return rankings
