"""Database models."""

from .node import Node, Scope, NODE_TYPES, DOC_STATUSES
from .version import DocumentVersion
from .tag import Tag
from .activity import Activity

__all__ = [
    "Node", "Scope", "NODE_TYPES", "DOC_STATUSES",
    "DocumentVersion",
    "Tag",
    "Activity",
]
