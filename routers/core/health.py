"""
Health check endpoints for the activity analytics application.

Provides endpoints to check the health status of the service:
- Basic health check
- Database health check (shared and local stores)
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config.settings import config
from config.database import check_integrity
from models.responses import DatabaseHealthResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Basic health check."""
    return HealthResponse(status="ok", version=config.version)


@router.get("/health/database", response_model=DatabaseHealthResponse)
def database_health_check():
    """
    Check that both datastores accept connections.

    Returns 200 when both stores are reachable, 503 otherwise.
    """
    stores = check_integrity()
    if all(stores.values()):
        return DatabaseHealthResponse(status="healthy", stores=stores)

    logger.warning("Database health check failed: %s", stores)
    return JSONResponse(
        status_code=503,
        content=DatabaseHealthResponse(status="unhealthy", stores=stores).model_dump()
    )
