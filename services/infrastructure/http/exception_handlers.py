"""
Exception handlers for the activity analytics application.

Handles:
- Request validation errors (422)
- Activity statistics errors (400 / 404 / 500)
- HTTP exceptions
- General unhandled exceptions
"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from config.settings import config
from services.activity.exceptions import (
    ActivityStatsError,
    InvalidWindowError,
    StatsQueryError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_DETAILS = "An internal error occurred while reading activity data."


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors (422 Unprocessable Entity).

    These occur when query parameters don't match the expected schema,
    e.g. an unknown period or granularity value.
    """
    path = getattr(request.url, 'path', '') if request and request.url else ''

    # Extract validation errors
    errors = exc.errors() if hasattr(exc, 'errors') else []
    error_details = []
    for error in errors:
        loc = error.get('loc', [])
        msg = error.get('msg', '')
        error_details.append(f"{'.'.join(str(x) for x in loc)}: {msg}")

    error_summary = '; '.join(error_details[:3])  # Show first 3 errors
    if len(error_details) > 3:
        error_summary += f" ... and {len(error_details) - 3} more"

    logger.debug("Request validation error on %s: %s", path, error_summary)

    return JSONResponse(
        status_code=422,
        content={
            "detail": error_details,
            "message": "Request validation failed. Please check your request parameters."
        }
    )


async def activity_stats_exception_handler(request: Request, exc: ActivityStatsError):
    """
    Map activity statistics errors to stable JSON responses.

    - UserNotFoundError -> 404 {"error": "User not found"}
    - InvalidWindowError -> 400 {"detail": message}
    - StatsQueryError (and any other ActivityStatsError) -> 500 {"error", "details"}

    Database exception text never reaches the client. In debug mode
    "details" carries the class name of the underlying exception.
    """
    path = getattr(request.url, 'path', '') if request and request.url else ''

    if isinstance(exc, UserNotFoundError):
        logger.debug("User not found on %s: %s", path, exc.user_sid)
        return JSONResponse(status_code=404, content={"error": exc.message})

    if isinstance(exc, InvalidWindowError):
        logger.debug("HTTP 400 on %s: %s", path, exc.message)
        return JSONResponse(status_code=400, content={"detail": exc.message})

    details = GENERIC_ERROR_DETAILS
    if config.debug:
        cause = exc.__cause__ if exc.__cause__ is not None else exc
        details = type(cause).__name__

    if isinstance(exc, StatsQueryError):
        logger.warning("Activity stats query failed on %s (module=%s)", path, exc.module)
    else:
        logger.error("Activity stats error on %s: %s", path, exc.message)

    return JSONResponse(
        status_code=500,
        content={"error": exc.message, "details": details}
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions.

    Returns FastAPI-standard format: {"detail": "error message"}
    This matches FastAPI's default HTTPException response format.
    """
    path = getattr(request.url, 'path', '') if request and request.url else ''

    if exc.status_code in (400, 404):
        # Client errors (missing parameters, unknown routes)
        logger.debug("HTTP %s on %s: %s", exc.status_code, path, exc.detail)
    else:
        logger.warning("HTTP %s on %s: %s", exc.status_code, path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}  # Use "detail" to match FastAPI standard
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    exception_type = type(exc).__name__
    request_path = getattr(request.url, 'path', '') if request and request.url else ''

    logger.error("Unhandled exception on %s: %s", request_path, exception_type, exc_info=True)

    error_response = {
        "error": "An unexpected error occurred. Please try again later.",
        "details": exception_type if config.debug else GENERIC_ERROR_DETAILS,
    }

    return JSONResponse(
        status_code=500,
        content=error_response
    )


def setup_exception_handlers(app: FastAPI):
    """
    Register all exception handlers with the FastAPI application.
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ActivityStatsError, activity_stats_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
