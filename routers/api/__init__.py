"""
API Router Module
=================

Combines the activity analytics endpoint routers:
- Activity statistics (overall dashboard, per-user drill-down)
- Material trends (by type, by category)
"""
from fastapi import APIRouter

from . import activity_stats, material_trends

router = APIRouter()

# Include all sub-routers
router.include_router(activity_stats.router)
router.include_router(material_trends.router)

__all__ = ["router"]
