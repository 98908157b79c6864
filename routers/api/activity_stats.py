"""
Activity Statistics Endpoints
=============================

- GET /activity/stats?type=overall - Global dashboard (totals, rankings, distribution)
- GET /activity/stats?type=individual&userSid=... - Per-user drill-down

Handlers are plain functions: every query is blocking SQLite I/O, so
FastAPI runs them in its threadpool.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_local_db, get_shared_db
from models.common import Granularity, Period, StatsType
from services.activity import ActivityStatsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activity Statistics"])


@router.get("/activity/stats")
def get_activity_stats(
    stats_type: StatsType = Query(StatsType.OVERALL, alias="type"),
    user_sid: Optional[str] = Query(None, alias="userSid"),
    user_id: Optional[str] = Query(None, alias="userId"),
    period: Period = Query(Period.ONE_MONTH),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    granularity: Optional[Granularity] = Query(None),
    shared_db: Session = Depends(get_shared_db),
    local_db: Session = Depends(get_local_db)
) -> Dict[str, Any]:
    """
    Get activity statistics.

    type=overall returns {overallStats, userRankings, userDistribution}.
    type=individual returns {user, period}; userId is accepted as an alias
    of userSid. Without either, the overall payload is returned. Granularity
    is chosen from the window when omitted.
    """
    service = ActivityStatsService(shared_db, local_db)

    if stats_type == StatsType.OVERALL:
        return service.get_overall_activity().model_dump(by_alias=True, mode="json")

    target_sid = (user_sid or user_id or "").strip()
    if not target_sid:
        logger.debug("[ActivityStats] type=individual without a user id, serving overall stats")
        return service.get_overall_activity().model_dump(by_alias=True, mode="json")

    result = service.get_individual_activity(
        target_sid,
        period=period,
        start_date=start_date,
        end_date=end_date,
        granularity=granularity
    )
    return result.model_dump(by_alias=True, mode="json")
