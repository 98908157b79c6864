"""
Router Registration Module

Centralized router registration for all FastAPI routes.
"""
import logging

from fastapi import FastAPI

from routers import api
from routers.core.health import router as health_router

logger = logging.getLogger(__name__)


def register_routers(app: FastAPI) -> None:
    """
    Register all FastAPI routers.

    1. Health check endpoints (no prefix)
    2. Activity statistics and material trend endpoints

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints
    app.include_router(health_router)

    # Analytics routes
    app.include_router(api.router)
    logger.debug("[RouterRegistration] Registered %d routes", len(app.routes))
