"""Shared tags and their usage counters."""

import logging
from typing import Iterable, List, Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..core.auth import Identity
from ..exceptions import TagNotFoundError, ValidationError
from ..models import Tag
from ..repositories.tag_repository import TagRepository
from .access_guard import require_identity

logger = logging.getLogger(__name__)


def normalize_tag_name(name: str) -> str:
    return name.strip().lower()


class TagService:
    """Tag lookup, creation, and usage-count bookkeeping.

    Public methods:
        list_tags      -- most used first, optional substring filter
        get_by_ids     -- resolve ids, silently dropping unknown ones
        require_tags   -- resolve ids, TagNotFoundError on the first unknown one
        get_or_create  -- idempotent create keyed by normalized name
        adjust_usage   -- best-effort +1 / -1 after a node's tags changed
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = TagRepository(db)

    def list_tags(self, search: Optional[str] = None, limit: int = 50) -> List[Tag]:
        needle = normalize_tag_name(search) if search else None
        return self.repo.list(needle, limit)

    def get_by_ids(self, tag_ids: List[str]) -> List[Tag]:
        return self.repo.get_by_ids(tag_ids)

    def require_tags(self, tag_ids: Iterable[str]) -> None:
        wanted = list(dict.fromkeys(tag_ids))
        found = {tag.id for tag in self.repo.get_by_ids(wanted)}
        for tag_id in wanted:
            if tag_id not in found:
                raise TagNotFoundError(tag_id)

    def get_or_create(
        self,
        identity: Optional[Identity],
        name: str,
        created_by_name: Optional[str] = None,
    ) -> Tag:
        identity = require_identity(identity)
        normalized = normalize_tag_name(name)
        if not normalized:
            raise ValidationError("Tag name cannot be empty", field="name")

        existing = self.repo.get_by_name(normalized)
        if existing:
            return existing

        tag = self.repo.create(
            name=normalized,
            display_name=name.strip(),
            created_by=identity.subject,
            created_by_name=created_by_name or identity.display_name,
        )
        self.db.commit()
        logger.info("Created tag", extra={"tag_id": tag.id, "tag_name": normalized})
        return tag

    def adjust_usage(self, added: Iterable[str], removed: Iterable[str]) -> None:
        """Bump usage counts for *added* and decrement (floored at 0) for *removed*.

        Runs in its own commit after the node change. Never raises.
        """
        added, removed = list(added), list(removed)
        if not added and not removed:
            return
        try:
            for tag in self.repo.get_by_ids(added):
                tag.usage_count = (tag.usage_count or 0) + 1
            for tag in self.repo.get_by_ids(removed):
                tag.usage_count = max(0, (tag.usage_count or 0) - 1)
            self.db.commit()
        except sqlalchemy.exc.SQLAlchemyError as e:
            logger.warning("Failed to adjust tag usage counts: %s", e)
            self.db.rollback()
