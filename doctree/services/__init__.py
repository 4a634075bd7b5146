"""Business logic services."""

from .node_service import NodeService
from .tag_service import TagService
from .version_service import VersionService

__all__ = ["NodeService", "TagService", "VersionService"]
