"""
Activity Repository
===================

Single read interface over the two embedded datastores:
- shared store: users, materials, material_views
- local store: login_events

The store for a query is chosen from the declarative base of the model or
column being queried, so aggregation code never handles sessions directly.
Grouped per-user lookups go through the BatchLoader (one query per metric,
never one query per user).

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from sqlalchemy import DateTime, distinct, func
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from models.domain.local_store import LocalBase
from models.domain.shared_store import MaterialView, User
from services.activity.batch_loader import BatchLoader
from services.activity.time_window import format_local_date

logger = logging.getLogger(__name__)


def _sql_count(column: Any = None) -> ColumnElement:
    """Helper function to call func.count for SQLAlchemy queries."""
    count_func = getattr(func, 'count')
    if column is None:
        return count_func()
    return count_func(column)


def _table_of(entity: Any):
    if hasattr(entity, "__table__"):
        return entity.__table__
    if hasattr(entity, "class_"):
        return entity.class_.__table__
    return entity.table


def _bound(column: Any, value: Any) -> Any:
    """
    Convert a range bound for ``column``.

    Absolute-timestamp columns only accept datetimes; calendar-date columns
    only accept local dates (stored as YYYY-MM-DD text).
    """
    is_instant_column = isinstance(column.type, DateTime)
    if is_instant_column:
        if not isinstance(value, datetime):
            raise TypeError(
                f"{column} holds absolute instants; pass a datetime, not {type(value).__name__}"
            )
        return value
    if isinstance(value, datetime):
        raise TypeError(f"{column} holds local calendar dates; convert the instant first")
    if isinstance(value, date):
        return format_local_date(value)
    return value


def _range_criteria(date_column: Any, start: Any, end: Any, end_exclusive: bool) -> Tuple[Any, Any]:
    lower = date_column >= _bound(date_column, start)
    if end_exclusive:
        return lower, date_column < _bound(date_column, end)
    return lower, date_column <= _bound(date_column, end)


class ActivityRepository:
    """Read-only query contract over the shared and local stores."""

    def __init__(self, shared_db: Session, local_db: Session, batch_loader: Optional[BatchLoader] = None):
        """
        Initialize repository.

        Args:
            shared_db: Session bound to the shared store
            local_db: Session bound to the local store
            batch_loader: Loader used for grouped per-user lookups
        """
        self.shared_db = shared_db
        self.local_db = local_db
        self.batch_loader = batch_loader or BatchLoader()

    def session_for(self, entity: Any) -> Session:
        """Session of the store that owns ``entity`` (model class or column)."""
        if _table_of(entity).metadata is LocalBase.metadata:
            return self.local_db
        return self.shared_db

    def query(self, *entities: Any) -> Query:
        """Start a query on the store owning the first entity."""
        return self.session_for(entities[0]).query(*entities)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_sid: str) -> Optional[User]:
        """Look up a user by sid, active or not."""
        return self.shared_db.query(User).filter(User.sid == user_sid).first()

    def list_active_users(self) -> List[User]:
        """All active users, ordered by sid."""
        return (
            self.shared_db.query(User)
            .filter(User.is_active.is_(True))
            .order_by(User.sid)
            .all()
        )

    # ------------------------------------------------------------------
    # Scalar counts
    # ------------------------------------------------------------------

    def count_all(self, model: Any, *criteria: Any) -> int:
        """COUNT(*) over ``model`` with optional filter criteria."""
        result = (
            self.session_for(model)
            .query(_sql_count())
            .select_from(model)
            .filter(*criteria)
            .scalar()
        )
        return int(result or 0)

    def count_distinct(self, distinct_column: Any, *criteria: Any) -> int:
        """COUNT(DISTINCT column) with optional filter criteria."""
        result = (
            self.session_for(distinct_column)
            .query(_sql_count(distinct(distinct_column)))
            .select_from(distinct_column.class_)
            .filter(*criteria)
            .scalar()
        )
        return int(result or 0)

    def count_groups_having(self, group_column: Any, distinct_column: Any, minimum: int, *criteria: Any) -> int:
        """
        Number of groups whose COUNT(DISTINCT distinct_column) >= minimum.

        Example: users with at least 5 distinct login dates.
        """
        groups = (
            self.query(group_column)
            .filter(*criteria)
            .group_by(group_column)
            .having(_sql_count(distinct(distinct_column)) >= minimum)
            .subquery()
        )
        result = self.session_for(group_column).query(_sql_count()).select_from(groups).scalar()
        return int(result or 0)

    def count_in_range(
        self,
        date_column: Any,
        start: Any,
        end: Any,
        *criteria: Any,
        end_exclusive: bool = False
    ) -> int:
        """COUNT(*) of rows whose ``date_column`` lies in the range."""
        result = (
            self.session_for(date_column)
            .query(_sql_count())
            .select_from(date_column.class_)
            .filter(*_range_criteria(date_column, start, end, end_exclusive), *criteria)
            .scalar()
        )
        return int(result or 0)

    # ------------------------------------------------------------------
    # Grouped per-user lookups (batched)
    # ------------------------------------------------------------------

    def count_grouped_by_user(self, group_column: Any, user_sids: Iterable[str], *criteria: Any) -> Dict[str, int]:
        """COUNT(*) per user, filtered by ``group_column IN (user_sids)``."""
        def build(chunk: List[str]) -> Query:
            return (
                self.session_for(group_column)
                .query(group_column.label("key"), _sql_count().label("count"))
                .filter(group_column.in_(chunk), *criteria)
                .group_by(group_column)
            )
        return self.batch_loader.load_map(build, user_sids)

    def count_distinct_grouped_by_user(
        self,
        distinct_column: Any,
        group_column: Any,
        user_sids: Iterable[str],
        *criteria: Any
    ) -> Dict[str, int]:
        """COUNT(DISTINCT distinct_column) per user."""
        def build(chunk: List[str]) -> Query:
            return (
                self.session_for(group_column)
                .query(group_column.label("key"), _sql_count(distinct(distinct_column)).label("count"))
                .filter(group_column.in_(chunk), *criteria)
                .group_by(group_column)
            )
        return self.batch_loader.load_map(build, user_sids)

    def count_grouped_by_user_and_date(
        self,
        group_column: Any,
        date_column: Any,
        user_sids: Iterable[str],
        *criteria: Any
    ) -> Dict[str, Dict[str, int]]:
        """Per-user map of calendar date -> COUNT(*)."""
        def build(chunk: List[str]) -> Query:
            return (
                self.session_for(group_column)
                .query(group_column.label("key"), date_column.label("date"), _sql_count().label("count"))
                .filter(group_column.in_(chunk), *criteria)
                .group_by(group_column, date_column)
                .order_by(group_column, date_column)
            )
        rows_by_user = self.batch_loader.load_lists(build, user_sids)
        return {
            user_sid: {row.date: int(row.count or 0) for row in rows}
            for user_sid, rows in rows_by_user.items()
        }

    def top_n_grouped_by_user(
        self,
        group_column: Any,
        item_columns: Sequence[Any],
        n: int,
        user_sids: Iterable[str],
        *criteria: Any,
        outerjoin: Optional[Tuple[Any, Any]] = None
    ) -> Dict[str, List[Any]]:
        """
        Top ``n`` items per user by row count, highest first.

        One ungrouped-by-limit query per chunk; truncation to ``n`` per user
        happens in the loader. Ties are broken by the item columns.
        """
        def build(chunk: List[str]) -> Query:
            count_label = _sql_count().label("count")
            query = (
                self.session_for(group_column)
                .query(group_column.label("key"), *item_columns, count_label)
                .select_from(group_column.class_)
            )
            if outerjoin is not None:
                query = query.outerjoin(*outerjoin)
            return (
                query.filter(group_column.in_(chunk), *criteria)
                .group_by(group_column, *item_columns)
                .order_by(group_column, count_label.desc(), *item_columns)
            )
        return self.batch_loader.load_lists(build, user_sids, limit_per_key=n)

    def view_totals_by_active_user(self) -> List[Any]:
        """
        One joined, grouped query over the shared store.

        Rows: (user_sid, display_name, view_count, unique_material_count) for
        every active user with at least one view.
        """
        return (
            self.shared_db.query(
                MaterialView.user_sid,
                User.display_name,
                _sql_count().label("view_count"),
                _sql_count(distinct(MaterialView.material_id)).label("unique_material_count")
            )
            .join(User, User.sid == MaterialView.user_sid)
            .filter(User.is_active.is_(True))
            .group_by(MaterialView.user_sid, User.display_name)
            .order_by(MaterialView.user_sid)
            .all()
        )

    # ------------------------------------------------------------------
    # Single-user lookups
    # ------------------------------------------------------------------

    def top_n(
        self,
        item_columns: Sequence[Any],
        n: int,
        *criteria: Any,
        outerjoin: Optional[Tuple[Any, Any]] = None
    ) -> List[Any]:
        """Top ``n`` items by row count (single grouped, ordered, limited query)."""
        count_label = _sql_count().label("count")
        query = (
            self.session_for(item_columns[0])
            .query(*item_columns, count_label)
            .select_from(item_columns[0].class_)
        )
        if outerjoin is not None:
            query = query.outerjoin(*outerjoin)
        return (
            query.filter(*criteria)
            .group_by(*item_columns)
            .order_by(count_label.desc(), *item_columns)
            .limit(n)
            .all()
        )

    def count_grouped_by_date(self, date_column: Any, *criteria: Any) -> Dict[str, int]:
        """Map of calendar date -> COUNT(*)."""
        rows = (
            self.session_for(date_column)
            .query(date_column.label("date"), _sql_count().label("count"))
            .filter(*criteria)
            .group_by(date_column)
            .order_by(date_column)
            .all()
        )
        return {row.date: int(row.count or 0) for row in rows}

    def range_query(
        self,
        columns: Sequence[Any],
        date_column: Any,
        start: Any,
        end: Any,
        *criteria: Any,
        end_exclusive: bool = False
    ) -> List[Any]:
        """
        Rows whose ``date_column`` lies in the range.

        Works for calendar-date and absolute-timestamp columns; callers
        convert absolute timestamps to local dates themselves.
        """
        return (
            self.query(*columns)
            .filter(*_range_criteria(date_column, start, end, end_exclusive), *criteria)
            .order_by(date_column)
            .all()
        )
