"""
Lifespan management for the activity analytics application.

Handles FastAPI application startup and shutdown lifecycle:
- Datastore initialization (shared and local stores)
- Resource cleanup on shutdown
"""

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from config.database import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Handles application initialization and cleanup.
    """
    # Startup timing
    startup_start = time.time()
    fastapi_app.state.start_time = startup_start
    fastapi_app.state.is_shutting_down = False

    # Only log startup messages from first worker to avoid repetition
    worker_id = os.getenv('UVICORN_WORKER_ID', '0')
    is_main_worker = (worker_id == '0' or not worker_id)

    if is_main_worker:
        logger.debug("[LIFESPAN] Initializing shared and local stores...")

    # Creates missing tables only; existing rows are never touched
    init_db()

    if is_main_worker:
        startup_duration = time.time() - startup_start
        logger.info("Application started in %.2fs", startup_duration)

    try:
        yield
    finally:
        # Shutdown - clean up resources gracefully
        fastapi_app.state.is_shutting_down = True

        try:
            close_db()
        except Exception as e:  # pylint: disable=broad-except
            if is_main_worker:
                logger.warning("Failed to close database: %s", e)
