"""
Activity Analytics Service Module

Aggregation of login and material-view activity across the shared and
local datastores.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from .activity_stats_service import ActivityStatsService
from .exceptions import (
    ActivityStatsError,
    InvalidWindowError,
    StatsQueryError,
    UserNotFoundError,
)
from .repository import ActivityRepository

__all__ = [
    "ActivityStatsService",
    "ActivityRepository",
    "ActivityStatsError",
    "InvalidWindowError",
    "StatsQueryError",
    "UserNotFoundError",
]
