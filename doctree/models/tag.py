"""Tag model."""

from sqlalchemy import Column, DateTime, Integer, String

from ..database import Base
from ..timeutils import utcnow


class Tag(Base):
    """Shared tag reusable across nodes. Nodes hold the references in tag_ids."""

    __tablename__ = "tags"

    id = Column(String(50), primary_key=True)  # tag-{hex}
    name = Column(String(100), nullable=False, unique=True)  # normalized lowercase
    display_name = Column(String(100), nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    created_by = Column(String(255), nullable=False)
    created_by_name = Column(String(255), nullable=False)
