"""Pydantic schemas for API validation."""

from .node import (
    NodeCreate,
    NodeCreateWithContent,
    NodeCreated,
    NodeResponse,
    FolderStatsResponse,
    ContributorResponse,
    DescendantItem,
    SearchHit,
)
from .version import VersionResponse, CurrentVersionResponse, MajorVersionRequest
from .tag import TagCreate, TagResponse
from .activity import ActivityCountResponse, ActivityResponse

__all__ = [
    "NodeCreate",
    "NodeCreateWithContent",
    "NodeCreated",
    "NodeResponse",
    "FolderStatsResponse",
    "ContributorResponse",
    "DescendantItem",
    "SearchHit",
    "VersionResponse",
    "CurrentVersionResponse",
    "MajorVersionRequest",
    "TagCreate",
    "TagResponse",
    "ActivityResponse",
    "ActivityCountResponse",
]
