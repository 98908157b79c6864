"""
Domain Models

SQLAlchemy database models for the two datastores read by the analytics core.
"""

from .shared_store import (
    SharedBase,
    User,
    Material,
    MaterialView,
)
from .local_store import LocalBase, LoginEvent

__all__ = [
    # Shared store
    "SharedBase",
    "User",
    "Material",
    "MaterialView",
    # Local store
    "LocalBase",
    "LoginEvent",
]
