"""Version repository for database operations."""

import uuid
from typing import Any, List, Optional

from ..exceptions import VersionNotFoundError
from ..models import DocumentVersion
from .base import BaseRepository


class VersionRepository(BaseRepository[DocumentVersion]):
    """Repository for document version snapshots. Rows are never updated."""

    model_class = DocumentVersion
    not_found_error = VersionNotFoundError

    def create(self, **fields: Any) -> DocumentVersion:
        version = DocumentVersion(id=f"ver-{uuid.uuid4().hex[:16]}", **fields)
        self.db.add(version)
        self.db.flush()
        return version

    def get_by_document(
        self, doc_id: str, limit: Optional[int] = None, only_major: bool = False
    ) -> List[DocumentVersion]:
        """Versions for a document, newest first."""
        query = self.db.query(DocumentVersion).filter(DocumentVersion.doc_id == doc_id)
        if only_major:
            query = query.filter(DocumentVersion.is_major_version.is_(True))
        query = query.order_by(
            DocumentVersion.created_at.desc(),
            DocumentVersion.major_version.desc(),
            DocumentVersion.minor_version.desc(),
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_for_document(self, doc_id: str) -> int:
        return self.db.query(DocumentVersion).filter(DocumentVersion.doc_id == doc_id).count()
