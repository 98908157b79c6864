"""
Response Models
===============

Pydantic models for activity statistics responses.

Field names are snake_case in Python and serialised as camelCase
(``model_dump(by_alias=True)``), which is the JSON contract consumed by
the dashboard.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.common import ActivityLevel, Granularity, Period


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(None, description="Additional detail (generic unless DEBUG)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "User not found"
            }
        }
    )


class OverallStats(CamelModel):
    """Global totals across both stores"""
    total_logins: int = Field(0, description="Login events in the local store")
    total_views: int = Field(0, description="Material view events")
    avg_views_per_user: int = Field(0, description="floor(total_views / total_users), 0 when no users")
    active_user_count: int = Field(0, description="Users with enough distinct login days")
    total_materials: int = Field(0, description="Published materials")
    total_users: int = Field(0, description="Active users")


class DailyCount(CamelModel):
    """Legacy daily point: views on one local date"""
    date: str
    count: int = 0


class ActivityBucket(CamelModel):
    """One bucket of an individual activity series"""
    date: str = Field(..., description="Bucket start date (YYYY-MM-DD)")
    view_count: int = 0
    upload_count: int = 0


class MaterialCount(CamelModel):
    """Views of one material by one user"""
    material_id: str
    title: str
    count: int = 0


class UserActivityStats(CamelModel):
    """Activity metrics of one user"""
    user_sid: str
    display_name: str
    login_count: int = 0
    view_count: int = 0
    unique_material_count: int = 0
    uploaded_material_count: int = 0
    active_day_count: int = 0
    daily_series: List[DailyCount] = Field(default_factory=list)
    bucketed_series: List[ActivityBucket] = Field(default_factory=list)
    top_materials: List[MaterialCount] = Field(default_factory=list)


class UserDistributionEntry(CamelModel):
    """Activity tier of one user"""
    user_sid: str
    display_name: Optional[str] = None
    view_count: int = 0
    unique_material_count: int = 0
    activity_level: ActivityLevel


class OverallActivityResponse(CamelModel):
    """Response model for GET /activity/stats?type=overall"""
    overall_stats: OverallStats
    user_rankings: List[UserActivityStats] = Field(default_factory=list)
    user_distribution: List[UserDistributionEntry] = Field(default_factory=list)


class IndividualActivityResponse(CamelModel):
    """Response model for GET /activity/stats?type=individual"""
    user: UserActivityStats
    period: Period


class MaterialTrendPoint(CamelModel):
    """Cumulative count of materials created up to a bucket"""
    date: str
    count: int = 0


class MaterialTrendResponse(CamelModel):
    """Response model for /analytics/materials/by-type and /by-category"""
    success: bool = True
    data: List[MaterialTrendPoint] = Field(default_factory=list)
    type: Optional[str] = None
    category_id: Optional[str] = None
    period: int
    granularity: Granularity


class HealthResponse(BaseModel):
    """Response model for /health endpoint"""
    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Application version")


class DatabaseHealthResponse(BaseModel):
    """Response model for /health/database endpoint"""
    status: str = Field(..., description="healthy or unhealthy")
    stores: Dict[str, bool] = Field(default_factory=dict, description="Reachability per store")
