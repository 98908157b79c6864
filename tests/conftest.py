"""
Pytest Configuration
====================

Ensures project root is in Python path for imports and provides in-memory
shared/local stores for the activity analytics tests.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to Python path
project_root = Path(__file__).parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Keep tests off the real data and log directories
os.environ.setdefault("SHARED_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOCAL_DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", "")

from models.domain.local_store import LocalBase, LoginEvent  # noqa: E402
from models.domain.shared_store import Material, MaterialView, SharedBase, User  # noqa: E402
from services.activity.repository import ActivityRepository  # noqa: E402

# 2024-03-15 12:00 local (+09:00)
FIXED_NOW = datetime(2024, 3, 15, 3, 0, 0)


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )


class StoreSeeder:
    """Inserts rows into the in-memory stores."""

    def __init__(self, shared_db, local_db):
        self.shared_db = shared_db
        self.local_db = local_db
        self._material_seq = 0

    def user(self, sid, display_name=None, is_active=True):
        user = User(sid=sid, username=sid, display_name=display_name or sid.title(), is_active=is_active)
        self.shared_db.add(user)
        self.shared_db.commit()
        return user

    def material(self, created_by="alice", created_at=None, title="Material", material_type="document",
                 category_id="cat-1", is_published=True, material_id=None):
        self._material_seq += 1
        material = Material(
            id=material_id or f"m{self._material_seq}",
            title=title,
            type=material_type,
            category_id=category_id,
            created_by=created_by,
            created_at=created_at or FIXED_NOW,
            is_published=is_published,
        )
        self.shared_db.add(material)
        self.shared_db.commit()
        return material

    def raw_material(self, material_id, created_by, created_at_text):
        """Insert a material row bypassing type processing (stored as given)."""
        self.shared_db.execute(
            text(
                "INSERT INTO materials (id, title, type, category_id, created_by, created_at, is_published) "
                "VALUES (:id, :title, :type, :category_id, :created_by, :created_at, 1)"
            ),
            {
                "id": material_id,
                "title": "Corrupt",
                "type": "document",
                "category_id": "cat-1",
                "created_by": created_by,
                "created_at": created_at_text,
            }
        )
        self.shared_db.commit()

    def view(self, user_sid, material_id, view_date):
        self.shared_db.add(MaterialView(material_id=material_id, user_sid=user_sid, view_date=view_date))
        self.shared_db.commit()

    def login(self, user_sid, *dates):
        for day in dates:
            self.local_db.add(LoginEvent(user_sid=user_sid, date=day))
        self.local_db.commit()


@pytest.fixture
def shared_engine():
    """In-memory shared store."""
    engine = _memory_engine()
    SharedBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def local_engine():
    """In-memory local store."""
    engine = _memory_engine()
    LocalBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def shared_db(shared_engine):
    session = sessionmaker(bind=shared_engine)()
    yield session
    session.close()


@pytest.fixture
def local_db(local_engine):
    session = sessionmaker(bind=local_engine)()
    yield session
    session.close()


@pytest.fixture
def repo(shared_db, local_db):
    return ActivityRepository(shared_db, local_db)


@pytest.fixture
def seed(shared_db, local_db):
    return StoreSeeder(shared_db, local_db)


@pytest.fixture
def now():
    return FIXED_NOW
