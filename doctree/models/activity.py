"""Activity model: advisory audit trail of node creation and deletion."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from ..database import Base
from ..timeutils import utcnow


class Activity(Base):
    """Immutable record of a node lifecycle event.

    Fields:
        type      -- doc_created, doc_deleted, folder_created, folder_deleted
        node_id   -- affected node (plain reference, survives node changes)
        details   -- free text, e.g. "Uploaded from report.docx"
    """

    __tablename__ = "activity"
    __table_args__ = (
        Index("ix_activity_org_id", "org_id"),
        Index("ix_activity_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(30), nullable=False)
    node_id = Column(String(50), nullable=True)
    node_title = Column(String(500), nullable=False, default="")
    node_type = Column(String(10), nullable=True)
    user_id = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=False)
    org_id = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
