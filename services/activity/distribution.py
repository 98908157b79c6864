"""
Activity Distribution Classifier
================================

Assigns each viewing user an activity tier from their view count and the
breadth of materials they viewed, relative to the most active user.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from typing import List
import logging

from models.common import ActivityLevel
from models.responses import UserDistributionEntry
from services.activity.repository import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_HIGH_THRESHOLD = 0.7
DEFAULT_MEDIUM_THRESHOLD = 0.4


def activity_score(view_count: int, unique_count: int, max_views: int, max_unique: int) -> float:
    """Mean of the view ratio and unique-material ratio, each in [0, 1]."""
    view_ratio = view_count / max(max_views, 1)
    unique_ratio = unique_count / max(max_unique, 1)
    return (view_ratio + unique_ratio) / 2


def classify_activity_level(
    score: float,
    high: float = DEFAULT_HIGH_THRESHOLD,
    medium: float = DEFAULT_MEDIUM_THRESHOLD
) -> ActivityLevel:
    """score > high -> high, score > medium -> medium, else low (strict comparisons)."""
    if score > high:
        return ActivityLevel.HIGH
    if score > medium:
        return ActivityLevel.MEDIUM
    return ActivityLevel.LOW


def build_user_distribution(
    repo: ActivityRepository,
    high: float = DEFAULT_HIGH_THRESHOLD,
    medium: float = DEFAULT_MEDIUM_THRESHOLD
) -> List[UserDistributionEntry]:
    """
    Classify every active user with at least one view.

    Args:
        repo: Repository over both stores
        high: Score above which a user is "high"
        medium: Score above which a user is "medium"

    Returns:
        One UserDistributionEntry per viewing user, ordered by user sid
    """
    rows = repo.view_totals_by_active_user()
    if not rows:
        return []

    max_views = max(int(row.view_count or 0) for row in rows)
    max_unique = max(int(row.unique_material_count or 0) for row in rows)

    entries = []
    for row in rows:
        view_count = int(row.view_count or 0)
        unique_count = int(row.unique_material_count or 0)
        score = activity_score(view_count, unique_count, max_views, max_unique)
        entries.append(UserDistributionEntry(
            user_sid=row.user_sid,
            display_name=row.display_name,
            view_count=view_count,
            unique_material_count=unique_count,
            activity_level=classify_activity_level(score, high, medium),
        ))

    logger.debug("[Distribution] Classified %d users (max views=%d)", len(entries), max_views)
    return entries
