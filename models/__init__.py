"""
Activity Analytics Pydantic Models
==================================

Response models for FastAPI type safety plus the SQLAlchemy store models.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from .responses import (
    ErrorResponse,
    OverallStats,
    DailyCount,
    ActivityBucket,
    MaterialCount,
    UserActivityStats,
    UserDistributionEntry,
    OverallActivityResponse,
    IndividualActivityResponse,
    MaterialTrendPoint,
    MaterialTrendResponse,
    HealthResponse,
    DatabaseHealthResponse,
)

from .common import StatsType, Period, PERIOD_DAYS, Granularity, ActivityLevel

from .domain import (
    SharedBase,
    User,
    Material,
    MaterialView,
    LocalBase,
    LoginEvent,
)

__all__ = [
    # Responses
    "ErrorResponse",
    "OverallStats",
    "DailyCount",
    "ActivityBucket",
    "MaterialCount",
    "UserActivityStats",
    "UserDistributionEntry",
    "OverallActivityResponse",
    "IndividualActivityResponse",
    "MaterialTrendPoint",
    "MaterialTrendResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    # Common
    "StatsType",
    "Period",
    "PERIOD_DAYS",
    "Granularity",
    "ActivityLevel",
    # Domain models
    "SharedBase",
    "User",
    "Material",
    "MaterialView",
    "LocalBase",
    "LoginEvent",
]
