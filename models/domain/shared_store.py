"""Shared Store Models.

Database models for the multi-user shared datastore: users, materials and
material views. The analytics core only reads these tables; rows are written
by the ingestion and CRUD paths.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import declarative_base


SharedBase = declarative_base()


class User(SharedBase):
    """
    User model

    Only active users (is_active=True) take part in rankings and the
    activity distribution.
    """
    __tablename__ = "users"

    sid = Column(String(64), primary_key=True)
    username = Column(String(100), nullable=False, default="")
    display_name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Material(SharedBase):
    """
    Published or draft learning material.

    created_at is an absolute instant stored as naive UTC. It must be
    converted to the local calendar date before being compared with any
    calendar-date column.
    """
    __tablename__ = "materials"

    id = Column(String(64), primary_key=True)
    title = Column(String(500), nullable=True)
    type = Column(String(50), nullable=True, index=True)  # e.g. "document", "video"
    category_id = Column(String(64), nullable=True, index=True)
    created_by = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    is_published = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("idx_materials_created_by_created_at", "created_by", "created_at"),
    )


class MaterialView(SharedBase):
    """
    One view of a material by a user on a local calendar date.

    The ingestion path records at most one row per (material, user, day).
    """
    __tablename__ = "material_views"

    material_id = Column(String(64), ForeignKey("materials.id", ondelete="CASCADE"), primary_key=True)
    user_sid = Column(String(64), primary_key=True)
    view_date = Column(String(10), primary_key=True)  # YYYY-MM-DD, local (+09:00) date

    __table_args__ = (
        Index("idx_material_views_user_date", "user_sid", "view_date"),
    )
