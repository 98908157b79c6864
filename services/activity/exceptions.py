"""
Activity statistics exceptions.

Provides specific exception types for the failure modes of the activity
analytics endpoints so routers can map them to stable HTTP responses.
"""

from typing import Optional


class ActivityStatsError(Exception):
    """Base exception for activity statistics errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[dict] = None):
        """
        Initialize activity statistics error.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional context (user_sid, module, ...)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class UserNotFoundError(ActivityStatsError):
    """Raised when the requested user does not exist in the shared store."""

    def __init__(self, user_sid: str, message: Optional[str] = None):
        super().__init__(
            message or "User not found",
            error_code="USER_NOT_FOUND",
            context={"user_sid": user_sid}
        )
        self.user_sid = user_sid


class InvalidWindowError(ActivityStatsError):
    """Raised when a requested date window cannot be resolved."""

    def __init__(self, message: str, start_date: Optional[str] = None, end_date: Optional[str] = None):
        super().__init__(
            message,
            error_code="INVALID_WINDOW",
            context={"start_date": start_date, "end_date": end_date}
        )


class StatsQueryError(ActivityStatsError):
    """
    Raised when a query against either datastore fails.

    The original database exception is chained as __cause__ and logged
    server-side; it is never returned to the caller.
    """

    def __init__(self, module: str, message: Optional[str] = None):
        super().__init__(
            message or "Failed to retrieve activity statistics",
            error_code="INTERNAL_ERROR",
            context={"module": module}
        )
        self.module = module
