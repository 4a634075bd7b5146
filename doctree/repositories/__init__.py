"""Data access repositories."""

from .base import BaseRepository
from .node_repository import NodeRepository
from .version_repository import VersionRepository
from .tag_repository import TagRepository

__all__ = [
    "BaseRepository",
    "NodeRepository",
    "VersionRepository",
    "TagRepository",
]
