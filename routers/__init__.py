"""
Activity Analytics FastAPI Routers
==================================

This package contains all FastAPI route modules organized by functionality.

Routers:
- api/: Activity statistics and material trend endpoints
- core/: Health checks

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from . import api
from .core import health

__all__ = [
    "api",
    "health",
]
