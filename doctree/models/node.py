"""Node model: folders and documents in one self-referencing table."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String

from ..database import Base
from ..timeutils import utcnow

NODE_TYPES = ("folder", "doc")
DOC_STATUSES = ("draft", "in_review", "final")


@dataclass(frozen=True)
class Scope:
    """Visibility scope: personal (owner_id) or organization (org_id), never both."""

    owner_id: Optional[str] = None
    org_id: Optional[str] = None

    def __post_init__(self):
        if (self.owner_id is None) == (self.org_id is None):
            raise ValueError("Scope needs exactly one of owner_id / org_id")

    @property
    def is_org(self) -> bool:
        return self.org_id is not None

    @classmethod
    def personal(cls, owner_id: str) -> "Scope":
        return cls(owner_id=owner_id)

    @classmethod
    def organization(cls, org_id: str) -> "Scope":
        return cls(org_id=org_id)

    @classmethod
    def of(cls, node: "Node") -> "Scope":
        if node.org_id is not None:
            return cls(org_id=node.org_id)
        return cls(owner_id=node.owner_id)

    def contains(self, node: "Node") -> bool:
        if self.is_org:
            return node.org_id == self.org_id
        return node.org_id is None and node.owner_id == self.owner_id


class Node(Base):
    """A folder or a document.

    Exactly one of owner_id (personal scope) and org_id (organization scope)
    is set. Soft-deleted rows stay in the table with is_deleted=True.
    """

    __tablename__ = "nodes"
    __table_args__ = (
        Index("ix_nodes_parent_id", "parent_id"),
        Index("ix_nodes_owner_parent_order", "owner_id", "parent_id", "order"),
        Index("ix_nodes_org_parent_order", "org_id", "parent_id", "order"),
        Index("ix_nodes_updated_at", "updated_at"),
    )

    id = Column(String(50), primary_key=True)  # node-{hex}
    type = Column(String(10), nullable=False)
    parent_id = Column(String(50), ForeignKey("nodes.id"), nullable=True)
    title = Column(String(500), nullable=False, default="")
    icon = Column(String(100), nullable=True)
    order = Column(Integer, nullable=False, default=0)

    # Visibility scope
    owner_id = Column(String(255), nullable=True)
    org_id = Column(String(255), nullable=True)

    # Opaque rich-text payloads
    content = Column(JSON, nullable=True)      # docs only, NULL until first write
    description = Column(JSON, nullable=True)  # folders only

    status = Column(String(20), nullable=True)  # docs only
    tag_ids = Column(JSON, default=list)

    # Version cursor, set on first content save
    current_major_version = Column(Integer, nullable=True)
    current_minor_version = Column(Integer, nullable=True)
    current_version_string = Column(String(20), nullable=True)
    last_version_snapshot_at = Column(DateTime, nullable=True)

    # Compare-and-swap guard, incremented on every content write.
    content_revision = Column(Integer, nullable=False, default=0)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime, nullable=True)

    # Audit
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
    updated_by = Column(String(255), nullable=True)
    updated_by_name = Column(String(255), nullable=True)

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"

    @property
    def is_doc(self) -> bool:
        return self.type == "doc"

    @property
    def last_touched_at(self):
        """updated_at, falling back to creation time for never-edited nodes."""
        return self.updated_at or self.created_at
