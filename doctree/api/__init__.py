"""API routes."""

from .nodes import router as nodes_router
from .versions import router as versions_router, version_router
from .tags import router as tags_router
from .activity import router as activity_router

__all__ = [
    "nodes_router",
    "versions_router",
    "version_router",
    "tags_router",
    "activity_router",
]
