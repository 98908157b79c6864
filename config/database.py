"""
Database Configuration for Activity Analytics

SQLAlchemy setup and session management for the two embedded datastores:
- shared store: users, materials, material views (multi-user)
- local store: login events (per device)

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""
from pathlib import Path
from typing import Dict
import logging

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from config.settings import config
from models.domain.local_store import LocalBase, LoginEvent
from models.domain.shared_store import SharedBase, Material, MaterialView, User

logger = logging.getLogger(__name__)

SHARED_DATABASE_URL = config.SHARED_DATABASE_URL
LOCAL_DATABASE_URL = config.LOCAL_DATABASE_URL


def _sqlite_file_path(database_url: str):
    """Return the database file path for a file-backed SQLite URL, else None."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def _set_sqlite_pragmas(dbapi_connection, _connection_record):
    """Enable WAL so readers do not block the ingestion writers."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def create_store_engine(database_url: str) -> Engine:
    """
    Create an engine for one of the embedded stores.

    SQLite connections are shared across FastAPI's threadpool workers, so
    check_same_thread is disabled and WAL is switched on for file databases.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        store_engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False
        )
        if _sqlite_file_path(database_url) is not None:
            event.listen(store_engine, "connect", _set_sqlite_pragmas)
        return store_engine

    return create_engine(
        database_url,
        pool_pre_ping=True,          # Test connection before using
        pool_recycle=1800,           # Recycle connections every 30 minutes
        echo=False
    )


shared_engine = create_store_engine(SHARED_DATABASE_URL)
local_engine = create_store_engine(LOCAL_DATABASE_URL)

# Create session factories
SharedSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=shared_engine)
LocalSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=local_engine)


def _create_missing_tables(store_name: str, base, store_engine: Engine) -> None:
    try:
        inspector = inspect(store_engine)
        existing_tables = set(inspector.get_table_names())
    except Exception as e:
        # create_all(checkfirst=True) below verifies existence again
        logger.debug("[Database] %s inspector check failed (assuming new database): %s", store_name, e)
        existing_tables = set()

    expected_tables = set(base.metadata.tables.keys())
    missing_tables = expected_tables - existing_tables
    if missing_tables:
        logger.info("[Database] Creating %s tables: %s", store_name, sorted(missing_tables))
    base.metadata.create_all(bind=store_engine, checkfirst=True)


def init_db():
    """
    Initialize both datastores: ensure data directories exist and create
    missing tables. Never modifies or deletes existing tables or rows.
    """
    for database_url in (SHARED_DATABASE_URL, LOCAL_DATABASE_URL):
        db_path = _sqlite_file_path(database_url)
        if db_path is not None:
            db_path.parent.mkdir(parents=True, exist_ok=True)

    registered = {
        "shared": [User.__tablename__, Material.__tablename__, MaterialView.__tablename__],
        "local": [LoginEvent.__tablename__],
    }
    logger.debug("[Database] Registered store tables: %s", registered)

    _create_missing_tables("shared", SharedBase, shared_engine)
    _create_missing_tables("local", LocalBase, local_engine)


def get_shared_db():
    """
    Dependency function to get a shared store session

    Usage in FastAPI:
        @router.get("/activity/stats")
        def get_stats(shared_db: Session = Depends(get_shared_db)):
            ...
    """
    db = SharedSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_local_db():
    """Dependency function to get a local store session."""
    db = LocalSessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_integrity() -> Dict[str, bool]:
    """
    Check both datastores using a connection test.

    Returns:
        Dict mapping store name to True if reachable, False otherwise
    """
    results = {}
    for store_name, store_engine in (("shared", shared_engine), ("local", local_engine)):
        try:
            with store_engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            results[store_name] = True
        except Exception as e:
            logger.error("[Database] %s store integrity check error: %s", store_name, e)
            results[store_name] = False
    return results


def close_db():
    """
    Close database connections (call on shutdown)
    """
    shared_engine.dispose()
    local_engine.dispose()
    logger.info("Database connections closed")
