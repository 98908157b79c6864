"""
Material Trend Endpoints
========================

Cumulative published-material counts over time:
- GET /analytics/materials/by-type?type=&period=&granularity=
- GET /analytics/materials/by-category?categoryId=&period=&granularity=

``period`` is a look-back in days.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from config.database import get_local_db, get_shared_db
from models.common import Granularity
from models.responses import MaterialTrendResponse
from services.activity import ActivityStatsService

router = APIRouter(prefix="/analytics/materials", tags=["Material Analytics"])

MAX_TREND_DAYS = 3650


def _require(value: Optional[str], name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{name} is required")
    return value


@router.get("/by-type")
def get_materials_by_type(
    material_type: Optional[str] = Query(None, alias="type"),
    period: int = Query(30, ge=1, le=MAX_TREND_DAYS),
    granularity: Granularity = Query(Granularity.DAILY),
    shared_db: Session = Depends(get_shared_db),
    local_db: Session = Depends(get_local_db)
) -> Dict[str, Any]:
    """Cumulative count of published materials of one type."""
    material_type = _require(material_type, "type")
    points = ActivityStatsService(shared_db, local_db).get_type_trend(material_type, period, granularity)
    response = MaterialTrendResponse(data=points, type=material_type, period=period, granularity=granularity)
    return response.model_dump(by_alias=True, mode="json", exclude={"category_id"})


@router.get("/by-category")
def get_materials_by_category(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    period: int = Query(30, ge=1, le=MAX_TREND_DAYS),
    granularity: Granularity = Query(Granularity.DAILY),
    shared_db: Session = Depends(get_shared_db),
    local_db: Session = Depends(get_local_db)
) -> Dict[str, Any]:
    """Cumulative count of published materials in one category."""
    category_id = _require(category_id, "categoryId")
    points = ActivityStatsService(shared_db, local_db).get_category_trend(category_id, period, granularity)
    response = MaterialTrendResponse(data=points, category_id=category_id, period=period, granularity=granularity)
    return response.model_dump(by_alias=True, mode="json", exclude={"type"})
