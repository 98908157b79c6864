"""
Middleware configuration for the activity analytics application.

Handles:
- CORS configuration
- Cache control headers
- Request/response logging
"""

import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from config.settings import config

logger = logging.getLogger(__name__)

# Requests slower than this are logged at WARNING
SLOW_REQUEST_SECONDS = 2.0


async def add_cache_control_headers(request: Request, call_next):
    """
    Statistics are recomputed on every request; never let a proxy or the
    browser serve a stale dashboard.
    """
    response = await call_next(request)
    path = request.url.path
    if path.startswith("/activity/") or path.startswith("/analytics/"):
        response.headers["Cache-Control"] = "no-store"
    return response


async def log_requests(request: Request, call_next):
    """
    Log all HTTP requests and responses with timing information.
    """
    start_time = time.time()

    log_path = request.url.path
    if request.url.query:
        log_path = f"{request.url.path}?{request.url.query}"

    # Process request
    response = await call_next(request)

    # Log combined request/response to save space
    response_time = time.time() - start_time
    client_host = request.client.host if request.client else "unknown"
    logger.debug(
        "Request: %s %s from %s Response: %s in %.3fs",
        request.method, log_path, client_host, response.status_code, response_time
    )

    # Overall dashboard touches every user; flag unusually slow aggregations
    if response_time > SLOW_REQUEST_SECONDS:
        logger.warning(
            "Slow request: %s %s took %.3fs",
            request.method, log_path, response_time
        )

    return response


def setup_middleware(app: FastAPI):
    """
    Register all middleware with the FastAPI application.

    Starlette runs middleware in reverse registration order, so the
    request logger (registered last) wraps everything else.
    """
    if config.debug:
        allowed_origins = ["*"]
    else:
        allowed_origins = config.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_cache_control_headers)
    app.middleware("http")(log_requests)
