"""
Common Pydantic Models and Enums
=================================

Shared enumerations used across requests, services and responses.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""
from enum import Enum


class StatsType(str, Enum):
    """Dashboard selector for GET /activity/stats"""
    OVERALL = "overall"
    INDIVIDUAL = "individual"


class Period(str, Enum):
    """Look-back window for individual activity"""
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    ONE_YEAR = "1year"
    CUSTOM = "custom"


# Days looked back for each non-custom period
PERIOD_DAYS = {
    Period.ONE_MONTH: 30,
    Period.THREE_MONTHS: 90,
    Period.SIX_MONTHS: 180,
    Period.ONE_YEAR: 365,
}


class Granularity(str, Enum):
    """Bucket size of an activity time series"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ActivityLevel(str, Enum):
    """Activity tier assigned by the distribution classifier"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
