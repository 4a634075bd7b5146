"""Tag repository for database operations."""

import uuid
from typing import List, Optional

from ..exceptions import TagNotFoundError
from ..models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """CRUD for shared tags."""

    model_class = Tag
    not_found_error = TagNotFoundError

    def create(self, name: str, display_name: str, created_by: str, created_by_name: str) -> Tag:
        tag = Tag(
            id=f"tag-{uuid.uuid4().hex[:16]}",
            name=name,
            display_name=display_name,
            usage_count=0,
            created_by=created_by,
            created_by_name=created_by_name,
        )
        self.db.add(tag)
        self.db.flush()
        return tag

    def get_by_name(self, name: str) -> Optional[Tag]:
        return self.db.query(Tag).filter(Tag.name == name).first()

    def get_by_ids(self, tag_ids: List[str]) -> List[Tag]:
        if not tag_ids:
            return []
        return self.db.query(Tag).filter(Tag.id.in_(tag_ids)).all()

    def list(self, search: Optional[str] = None, limit: int = 50) -> List[Tag]:
        """Most used first, optionally narrowed to names containing *search*."""
        query = self.db.query(Tag)
        if search:
            query = query.filter(Tag.name.contains(search, autoescape=True))
        return query.order_by(Tag.usage_count.desc(), Tag.name).limit(limit).all()
