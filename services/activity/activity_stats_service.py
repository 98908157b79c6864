"""
Activity Stats Service
======================

Service layer for the activity dashboards. Wraps the builders, applies the
configured policy values and turns datastore failures into a single
StatsQueryError per request.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from datetime import datetime
from typing import Callable, List, Optional, TypeVar
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.settings import config
from models.common import Granularity, Period
from models.responses import (
    IndividualActivityResponse,
    MaterialTrendPoint,
    OverallActivityResponse,
)
from services.activity.distribution import build_user_distribution
from services.activity.exceptions import StatsQueryError
from services.activity.material_trends import build_category_trend, build_type_trend
from services.activity.overall_stats import collect_overall_stats
from services.activity.rankings import build_user_rankings
from services.activity.repository import ActivityRepository
from services.activity.time_series import build_individual_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ActivityStatsService:
    """
    Activity analytics service.

    Every public method either returns a fully assembled response or raises;
    results are only built after all queries have succeeded.
    """

    def __init__(self, shared_db: Session, local_db: Session, now: Optional[datetime] = None):
        """
        Initialize service.

        Args:
            shared_db: Session bound to the shared store
            local_db: Session bound to the local store
            now: Reference instant (defaults to the current time per request)
        """
        self.repo = ActivityRepository(shared_db, local_db)
        self.now = now

    def _run(self, builder: Callable[..., T], *args, **kwargs) -> T:
        """
        Run a builder, translating any datastore error into StatsQueryError.

        ValueError and TypeError are raised by result processing when a stored
        value cannot be converted (e.g. a malformed timestamp) and count as
        store corruption.
        """
        try:
            return builder(*args, **kwargs)
        except (SQLAlchemyError, ValueError, TypeError) as e:
            module = builder.__module__
            logger.error("[ActivityStats] Query failed in %s: %s", module, e, exc_info=True)
            raise StatsQueryError(module) from e

    def get_overall_activity(self) -> OverallActivityResponse:
        """Global dashboard: totals, rankings and the activity distribution."""
        overall_stats = self._run(
            collect_overall_stats,
            self.repo,
            active_user_min_days=config.ACTIVE_USER_MIN_DAYS
        )
        user_rankings = self._run(
            build_user_rankings,
            self.repo,
            series_days=config.RANKING_DAILY_SERIES_DAYS,
            top_n=config.TOP_MATERIALS_LIMIT,
            now=self.now
        )
        user_distribution = self._run(
            build_user_distribution,
            self.repo,
            high=config.ACTIVITY_LEVEL_HIGH_THRESHOLD,
            medium=config.ACTIVITY_LEVEL_MEDIUM_THRESHOLD
        )
        logger.info(
            "[ActivityStats] Overall stats: %d users ranked, %d classified",
            len(user_rankings), len(user_distribution)
        )
        return OverallActivityResponse(
            overall_stats=overall_stats,
            user_rankings=user_rankings,
            user_distribution=user_distribution,
        )

    def get_individual_activity(
        self,
        user_sid: str,
        period: Period = Period.ONE_MONTH,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        granularity: Optional[Granularity] = None
    ) -> IndividualActivityResponse:
        """Per-user drill-down for one period."""
        user_stats = self._run(
            build_individual_stats,
            self.repo,
            user_sid,
            period=period,
            start_date=start_date,
            end_date=end_date,
            granularity=granularity,
            top_n=config.TOP_MATERIALS_LIMIT,
            now=self.now
        )
        logger.info("[ActivityStats] Individual stats for user %s (period=%s)", user_sid, Period(period).value)
        return IndividualActivityResponse(user=user_stats, period=period)

    def get_type_trend(self, material_type: str, days: int, granularity: Granularity) -> List[MaterialTrendPoint]:
        """Cumulative published materials of one type."""
        return self._run(build_type_trend, self.repo, material_type, days, granularity, now=self.now)

    def get_category_trend(self, category_id: str, days: int, granularity: Granularity) -> List[MaterialTrendPoint]:
        """Cumulative published materials in one category."""
        return self._run(build_category_trend, self.repo, category_id, days, granularity, now=self.now)
