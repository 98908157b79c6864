"""
Overall Stats Collector
=======================

Global totals for the activity dashboard, read from both datastores.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

import logging

from models.domain.local_store import LoginEvent
from models.domain.shared_store import Material, MaterialView, User
from models.responses import OverallStats
from services.activity.repository import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_USER_MIN_DAYS = 5


def average_views_per_user(total_views: int, total_users: int) -> int:
    """floor(total_views / total_users); 0 when there are no users."""
    if total_users <= 0:
        return 0
    return total_views // total_users


def collect_overall_stats(
    repo: ActivityRepository,
    active_user_min_days: int = DEFAULT_ACTIVE_USER_MIN_DAYS
) -> OverallStats:
    """
    Collect global totals across the shared and local stores.

    Args:
        repo: Repository over both stores
        active_user_min_days: Distinct login dates needed to count a user as active

    Returns:
        OverallStats with all six totals
    """
    total_logins = repo.count_all(LoginEvent)
    total_views = repo.count_all(MaterialView)
    total_users = repo.count_all(User, User.is_active.is_(True))
    active_user_count = repo.count_groups_having(
        LoginEvent.user_sid,
        LoginEvent.date,
        active_user_min_days
    )
    total_materials = repo.count_all(Material, Material.is_published.is_(True))

    stats = OverallStats(
        total_logins=total_logins,
        total_views=total_views,
        avg_views_per_user=average_views_per_user(total_views, total_users),
        active_user_count=active_user_count,
        total_materials=total_materials,
        total_users=total_users,
    )
    logger.debug(
        "[OverallStats] logins=%d views=%d users=%d active=%d materials=%d",
        total_logins, total_views, total_users, active_user_count, total_materials
    )
    return stats
