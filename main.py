"""
Activity Analytics Aggregation Service (FastAPI)
================================================

Read-only usage dashboards (global totals, per-user rankings, per-user time
series, activity-level classification) over the shared and local stores.

Version: See VERSION file (centralized version management)
Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

# Third-party imports
from fastapi import FastAPI

# First-party imports
from config.settings import config
from routers.register import register_routers
from services.infrastructure.utils.logging_config import setup_logging
from services.infrastructure.lifecycle.lifespan import lifespan
from services.infrastructure.http.middleware import setup_middleware
from services.infrastructure.http.exception_handlers import setup_exception_handlers
from services.infrastructure.process.server_launcher import run_server

# Setup logging (must happen early, before other modules use logger)
logger = setup_logging()

# ============================================================================
# FASTAPI APPLICATION INITIALIZATION
# ============================================================================

app = FastAPI(
    title="Activity Analytics API",
    description="Login and material-view activity dashboards",
    version=config.version,
    # Disable Swagger UI in production (only enable in DEBUG mode)
    docs_url="/docs" if config.debug else None,
    redoc_url="/redoc" if config.debug else None,
    lifespan=lifespan
)

# ============================================================================
# MIDDLEWARE & EXCEPTION HANDLERS
# ============================================================================

setup_middleware(app)
setup_exception_handlers(app)

# ============================================================================
# ROUTER REGISTRATION
# ============================================================================

register_routers(app)

# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    run_server()
