"""Services package for the Activity Analytics application.

This package contains:
- activity: Statistics builders, store access and the service facade
- infrastructure: HTTP handlers, lifecycle, process launch and logging

Import directly from subpackages:
    from services.activity import ActivityStatsService
"""

__all__ = []
