"""Version history of documents.

Minor versions are produced as a side effect of NodeService.update_content.
This service reads the history and records explicit major versions.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.auth import Identity
from ..exceptions import ConflictError, InvalidStateError
from ..models import DocumentVersion, Node
from ..repositories import NodeRepository, VersionRepository
from ..timeutils import Clock, utcnow
from .access_guard import check_node_access, is_visible, require_identity
from .version_snapshotter import INITIAL_MAJOR, INITIAL_MINOR, format_version

logger = logging.getLogger(__name__)


class VersionService:
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.node_repo = NodeRepository(db)
        self.version_repo = VersionRepository(db)
        self.clock = clock or utcnow

    def _visible_doc(self, identity: Optional[Identity], doc_id: str) -> Optional[Node]:
        node = self.node_repo.get(doc_id)
        if not is_visible(identity, node) or not node.is_doc:
            return None
        return node

    def get_current_version(self, identity: Optional[Identity], doc_id: str) -> Optional[dict]:
        """Version cursor of a doc. Never-saved docs report v1.0."""
        doc = self._visible_doc(identity, doc_id)
        if doc is None:
            return None
        major = doc.current_major_version or INITIAL_MAJOR
        minor = doc.current_minor_version if doc.current_minor_version is not None else INITIAL_MINOR
        return {
            "doc_id": doc.id,
            "major_version": major,
            "minor_version": minor,
            "version_string": doc.current_version_string or format_version(major, minor),
            "last_version_snapshot_at": doc.last_version_snapshot_at,
        }

    def get_version_history(
        self,
        identity: Optional[Identity],
        doc_id: str,
        limit: Optional[int] = None,
        only_major: bool = False,
    ) -> List[DocumentVersion]:
        if self._visible_doc(identity, doc_id) is None:
            return []
        return self.version_repo.get_by_document(doc_id, limit=limit, only_major=only_major)

    def get_version(self, identity: Optional[Identity], version_id: str) -> Optional[DocumentVersion]:
        """A single version, or None when it or its document is not visible."""
        version = self.version_repo.get_by_id_optional(version_id)
        if version is None or self._visible_doc(identity, version.doc_id) is None:
            return None
        return version

    def bump_major_version(
        self,
        identity: Optional[Identity],
        doc_id: str,
        change_summary: Optional[str] = None,
    ) -> DocumentVersion:
        """Freeze the current content as the next major version (minor resets to 0)."""
        identity = require_identity(identity)
        doc = check_node_access(identity, self.node_repo.get(doc_id), doc_id)
        if not doc.is_doc:
            raise InvalidStateError("Only documents have versions", node_id=doc_id)

        now = self.clock()
        major = (doc.current_major_version or INITIAL_MAJOR) + 1
        version_string = format_version(major, 0)
        cursor = {
            "current_major_version": major,
            "current_minor_version": 0,
            "current_version_string": version_string,
            "last_version_snapshot_at": now,
        }
        if not self.node_repo.compare_and_patch(doc.id, doc.content_revision or 0, cursor):
            self.db.rollback()
            raise ConflictError(doc_id)

        version = self.version_repo.create(
            doc_id=doc.id,
            major_version=major,
            minor_version=0,
            version_string=version_string,
            content=doc.content,
            title=doc.title,
            created_at=now,
            created_by=identity.subject,
            created_by_name=identity.display_name,
            is_major_version=True,
            change_summary=change_summary,
        )
        self.db.commit()
        logger.info("Recorded major version", extra={"node_id": doc_id, "version": version_string})
        return version
