"""
Local Store Models
==================

Per-device datastore holding login events. Used for login counts and
distinct active days.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from sqlalchemy import Column, Integer, String, Index
from sqlalchemy.orm import declarative_base


LocalBase = declarative_base()


class LoginEvent(LocalBase):
    """
    Login event keyed by local calendar date.

    The store may hold more than one row per user and day; distinct active
    days are always counted with COUNT(DISTINCT date).
    """
    __tablename__ = "login_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_sid = Column(String(64), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD, local (+09:00) date

    __table_args__ = (
        Index("idx_login_events_user_date", "user_sid", "date"),
    )
