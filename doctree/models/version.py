"""Document version model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from ..database import Base
from ..timeutils import utcnow


class DocumentVersion(Base):
    """Immutable snapshot of a document's content and title.

    The content frozen here is the content *before* the save that triggered
    the snapshot.
    """

    __tablename__ = "document_versions"
    __table_args__ = (
        Index("ix_document_versions_doc_id", "doc_id"),
        Index("ix_document_versions_created_at", "created_at"),
    )

    id = Column(String(50), primary_key=True)  # ver-{hex}
    doc_id = Column(String(50), ForeignKey("nodes.id"), nullable=False)

    major_version = Column(Integer, nullable=False)
    minor_version = Column(Integer, nullable=False)
    version_string = Column(String(20), nullable=False)

    content = Column(JSON, nullable=True)
    title = Column(String(500), nullable=False, default="")

    created_at = Column(DateTime, nullable=False, default=utcnow)
    created_by = Column(String(255), nullable=False)
    created_by_name = Column(String(255), nullable=False)

    # Only manual major bumps set this; batch snapshots are always minor.
    is_major_version = Column(Boolean, nullable=False, default=False)
    change_summary = Column(Text, nullable=True)

    document = relationship("Node")
