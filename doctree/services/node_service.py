"""Node service: deep module for the folder/document tree.

Every client operation enters here with an explicit acting identity:

    queries    -- list, get, get_children, folder stats, contributors,
                  descendants, search. Never raise for a missing identity,
                  a missing node or a denied node: they return None or [].
    mutations  -- create, update_*, move, reorder, remove, toggle_sharing.
                  Load the target fresh in this session, re-check access,
                  then commit once. Raise DocTreeException subclasses.

The pure building blocks (access_guard, sibling_index, tree_walker,
version_snapshotter, search_ranker) make the decisions; this class loads
rows, applies the decisions through NodeRepository and commits. Activity
entries and tag usage counts are written after that commit and never fail
the operation.
"""

import logging
from datetime import timedelta
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.auth import Identity
from ..core.config import settings
from ..exceptions import ConflictError, InvalidStateError, NodeNotFoundError, ValidationError
from ..models import DOC_STATUSES, NODE_TYPES, Node, Scope
from ..repositories import NodeRepository, VersionRepository
from ..timeutils import Clock, utcnow
from . import activity_service
from .access_guard import check_node_access, is_visible, require_identity, scope_for
from .content_text import TextExtractor, extract_text
from .search_ranker import rank_titles
from .sibling_index import append_order, next_order, plan_reorder
from .tag_service import TagService
from .tree_walker import (
    Contributor,
    FolderStats,
    TreeIndex,
    cascade_targets,
    descendants,
    folder_contributors,
    folder_stats,
)
from .version_snapshotter import initial_cursor, plan_content_write

logger = logging.getLogger(__name__)


class NodeService:
    """Tree operations for one database session."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        extractor: TextExtractor = extract_text,
        batch_window: Optional[float] = None,
    ):
        self.db = db
        self.repo = NodeRepository(db)
        self.version_repo = VersionRepository(db)
        self.tags = TagService(db)
        self.clock = clock or utcnow
        self.extractor = extractor
        seconds = settings.version_batch_window_seconds if batch_window is None else batch_window
        self.batch_window = timedelta(seconds=seconds)

    # --- Internal helpers ---

    def _load(self, identity: Optional[Identity], node_id: str) -> Tuple[Identity, Node]:
        identity = require_identity(identity)
        node = check_node_access(identity, self.repo.get(node_id), node_id)
        return identity, node

    def _audit(self, identity: Identity, now) -> dict:
        return {
            "updated_at": now,
            "updated_by": identity.subject,
            "updated_by_name": identity.display_name,
        }

    def _validate_parent(
        self, scope: Scope, parent_id: Optional[str], moving: Optional[Node] = None
    ) -> None:
        """A non-null parent must be a live folder of the same scope.

        When *moving* is given, the parent must not be that node or one of
        its descendants.
        """
        if parent_id is None:
            return
        parent = self.repo.get(parent_id)
        if parent is None or parent.is_deleted:
            raise NodeNotFoundError(parent_id, message=f"Parent not found: {parent_id}")
        if not parent.is_folder:
            raise InvalidStateError("Parent must be a folder", node_id=parent_id)
        if not scope.contains(parent):
            raise InvalidStateError("Parent belongs to a different scope", node_id=parent_id)
        if moving is not None:
            index = TreeIndex(self.repo.list_scope(scope))
            if any(a.id == moving.id for a in index.ancestors(parent_id)):
                raise InvalidStateError(
                    "Cannot move a node into itself or one of its descendants",
                    node_id=moving.id,
                )

    def _patch(self, identity: Optional[Identity], node_id: str, fields: dict) -> Node:
        identity, node = self._load(identity, node_id)
        self.repo.patch(node.id, {**fields, **self._audit(identity, self.clock())})
        self.db.commit()
        return node

    def _visible_folder(self, identity: Optional[Identity], folder_id: str) -> Optional[Node]:
        node = self.get(identity, folder_id)
        if node is None or not node.is_folder:
            return None
        return node

    def _scope_index(self, node: Node) -> TreeIndex:
        return TreeIndex(self.repo.list_scope(Scope.of(node)))

    # --- Queries ---

    def list(self, identity: Optional[Identity], org_id: Optional[str] = None) -> List[Node]:
        """Non-deleted nodes of the organization, or of the caller's personal scope."""
        if identity is None:
            return []
        return self.repo.list_scope(scope_for(identity, org_id))

    def list_personal(self, identity: Optional[Identity]) -> List[Node]:
        return self.list(identity)

    def list_organization(self, identity: Optional[Identity], org_id: str) -> List[Node]:
        if not org_id:
            return []
        return self.list(identity, org_id)

    def get(self, identity: Optional[Identity], node_id: str) -> Optional[Node]:
        """The node, or None when missing, deleted or not accessible."""
        node = self.repo.get(node_id)
        return node if is_visible(identity, node) else None

    def get_children(
        self,
        identity: Optional[Identity],
        parent_id: Optional[str],
        org_id: Optional[str] = None,
    ) -> List[Node]:
        if identity is None:
            return []
        if parent_id is not None and self.get(identity, parent_id) is None:
            return []
        return self.repo.get_children(scope_for(identity, org_id), parent_id)

    def get_folder_stats(self, identity: Optional[Identity], folder_id: str) -> Optional[FolderStats]:
        folder = self._visible_folder(identity, folder_id)
        if folder is None:
            return None
        return folder_stats(self._scope_index(folder), folder, self.extractor)

    def get_folder_contributors(
        self, identity: Optional[Identity], folder_id: str, limit: Optional[int] = None
    ) -> List[Contributor]:
        folder = self._visible_folder(identity, folder_id)
        if folder is None:
            return []
        if limit is None:
            limit = settings.default_contributors_limit
        return folder_contributors(self._scope_index(folder), folder.id, limit)

    def get_descendants(
        self, identity: Optional[Identity], folder_id: str, max_depth: Optional[int] = None
    ) -> List[dict]:
        folder = self._visible_folder(identity, folder_id)
        if folder is None:
            return []
        if max_depth is None:
            max_depth = settings.default_descendants_depth
        return descendants(self._scope_index(folder), folder.id, max_depth)

    def search(
        self,
        identity: Optional[Identity],
        query: str,
        org_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Node]:
        """Rank docs of the personal scope plus, optionally, one organization."""
        if identity is None:
            return []
        docs = self.repo.list_docs(Scope.personal(identity.subject))
        if org_id:
            docs += self.repo.list_docs(Scope.organization(org_id))
        if limit is None:
            limit = settings.default_search_limit
        return rank_titles(docs, query or "", limit)

    # --- Creation ---

    def create(
        self,
        identity: Optional[Identity],
        type: str,
        parent_id: Optional[str],
        title: str,
        org_id: Optional[str] = None,
    ) -> str:
        """Create an empty folder or doc after its current siblings. Returns the id."""
        identity = require_identity(identity)
        if type not in NODE_TYPES:
            raise ValidationError(f"Unknown node type: {type}", field="type")
        return self._insert(identity, type, parent_id, title, org_id)

    def create_with_content(
        self,
        identity: Optional[Identity],
        parent_id: Optional[str],
        title: str,
        content: Any,
        org_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> str:
        """Create a doc that already has content, versioned from v1.0."""
        identity = require_identity(identity)
        now = self.clock()
        details = f"Uploaded from {source_file}" if source_file else None
        return self._insert(
            identity, "doc", parent_id, title, org_id,
            extra={"content": content, **initial_cursor(now)},
            details=details,
            now=now,
        )

    def _insert(
        self,
        identity: Identity,
        type: str,
        parent_id: Optional[str],
        title: str,
        org_id: Optional[str],
        extra: Optional[dict] = None,
        details: Optional[str] = None,
        now=None,
    ) -> str:
        scope = scope_for(identity, org_id)
        self._validate_parent(scope, parent_id)
        now = now or self.clock()

        node = self.repo.insert(
            type=type,
            parent_id=parent_id,
            title=title,
            order=next_order(self.repo, scope, parent_id),
            owner_id=scope.owner_id,
            org_id=scope.org_id,
            status="draft" if type == "doc" else None,
            tag_ids=[],
            created_at=now,
            **self._audit(identity, now),
            **(extra or {}),
        )
        node_id = node.id
        self.db.commit()
        logger.info("Created node", extra={"node_id": node_id, "node_type": type, "parent_id": parent_id})

        activity_service.record(self.db, f"{type}_created", node, identity, details=details, now=now)
        return node_id

    # --- Field updates ---

    def update_title(self, identity: Optional[Identity], node_id: str, title: str) -> Node:
        return self._patch(identity, node_id, {"title": title})

    def update_icon(self, identity: Optional[Identity], node_id: str, icon: Optional[str]) -> Node:
        return self._patch(identity, node_id, {"icon": icon})

    def update_status(self, identity: Optional[Identity], node_id: str, status: str) -> Node:
        identity, node = self._load(identity, node_id)
        if not node.is_doc:
            raise InvalidStateError("Only documents have a status", node_id=node_id)
        if status not in DOC_STATUSES:
            raise ValidationError(f"Unknown status: {status}", field="status")
        return self._patch(identity, node_id, {"status": status})

    def update_description(self, identity: Optional[Identity], node_id: str, description: Any) -> Node:
        identity, node = self._load(identity, node_id)
        if not node.is_folder:
            raise InvalidStateError("Only folders have a description", node_id=node_id)
        return self._patch(identity, node_id, {"description": description})

    def update_tags(self, identity: Optional[Identity], node_id: str, tag_ids: Iterable[str]) -> Node:
        """Replace the node's tags, then adjust usage counts for the difference."""
        identity, node = self._load(identity, node_id)
        wanted = list(dict.fromkeys(tag_ids))
        self.tags.require_tags(wanted)

        previous = list(node.tag_ids or [])
        added = [t for t in wanted if t not in previous]
        removed = [t for t in previous if t not in wanted]

        node = self._patch(identity, node_id, {"tag_ids": wanted})
        self.tags.adjust_usage(added, removed)
        return node

    def update_content(self, identity: Optional[Identity], node_id: str, content: Any) -> Node:
        """Write doc content, freezing the previous content when the batch window elapsed.

        Content and version cursor go out in one compare-and-swap on
        content_revision. Losing the race raises ConflictError and nothing
        is written.
        """
        identity, node = self._load(identity, node_id)
        if not node.is_doc:
            raise InvalidStateError("Only documents have content", node_id=node_id)

        now = self.clock()
        plan = plan_content_write(node, now, self.batch_window)
        expected_revision = node.content_revision or 0
        prior_content, prior_title = node.content, node.title

        fields = {"content": content, **self._audit(identity, now), **plan.cursor_fields(now)}
        if not self.repo.compare_and_patch(node.id, expected_revision, fields):
            self.db.rollback()
            logger.warning("Content write lost a race", extra={"node_id": node_id})
            raise ConflictError(node_id)

        if plan.create_snapshot:
            self.version_repo.create(
                doc_id=node_id,
                major_version=plan.major,
                minor_version=plan.minor,
                version_string=plan.version_string,
                content=prior_content,
                title=prior_title,
                created_at=now,
                created_by=identity.subject,
                created_by_name=identity.display_name,
                is_major_version=False,
            )
            logger.info(
                "Created version snapshot",
                extra={"node_id": node_id, "version": plan.version_string},
            )
        else:
            logger.debug("Content save batched into current version", extra={"node_id": node_id})

        self.db.commit()
        return node

    # --- Structure ---

    def move(self, identity: Optional[Identity], node_id: str, new_parent_id: Optional[str]) -> Node:
        """Re-parent the node and append it after the new siblings."""
        identity, node = self._load(identity, node_id)
        scope = Scope.of(node)
        self._validate_parent(scope, new_parent_id, moving=node)

        siblings = [s for s in self.repo.get_children(scope, new_parent_id) if s.id != node.id]
        fields = {"parent_id": new_parent_id, "order": append_order(siblings)}
        self.repo.patch(node.id, {**fields, **self._audit(identity, self.clock())})
        self.db.commit()
        logger.info("Moved node", extra={"node_id": node_id, "parent_id": new_parent_id})
        return node

    def reorder(
        self,
        identity: Optional[Identity],
        node_id: str,
        new_parent_id: Optional[str],
        new_order: int,
    ) -> Node:
        """Place the node at slot *new_order* of the destination bucket.

        The destination is renumbered 0..N-1; siblings whose order does not
        change are left untouched.
        """
        identity, node = self._load(identity, node_id)
        scope = Scope.of(node)
        self._validate_parent(scope, new_parent_id, moving=node)

        plan = plan_reorder(self.repo.get_children(scope, new_parent_id), node.id, new_order)
        for sibling, order in plan.updates:
            self.repo.patch(sibling.id, {"order": order})

        fields = {"parent_id": new_parent_id, "order": plan.target_order}
        self.repo.patch(node.id, {**fields, **self._audit(identity, self.clock())})
        self.db.commit()
        logger.info(
            "Reordered node",
            extra={
                "node_id": node_id,
                "parent_id": new_parent_id,
                "order": plan.target_order,
                "siblings_renumbered": len(plan.updates),
            },
        )
        return node

    def remove(self, identity: Optional[Identity], node_id: str) -> None:
        """Soft-delete the node and its direct children."""
        identity, node = self._load(identity, node_id)
        now = self.clock()

        children = cascade_targets(self.repo, node)
        self.repo.patch(node.id, {"is_deleted": True, "deleted_at": now, **self._audit(identity, now)})
        for child in children:
            self.repo.patch(child.id, {"is_deleted": True, "deleted_at": now})
        node_type = node.type
        self.db.commit()
        logger.info("Deleted node", extra={"node_id": node_id, "cascaded": len(children)})

        activity_service.record(self.db, f"{node_type}_deleted", node, identity, now=now)

    def toggle_sharing(
        self, identity: Optional[Identity], node_id: str, org_id: Optional[str] = None
    ) -> Node:
        """Flip the node between the organization and the caller's personal scope.

        The node's live subtree follows it. A node whose parent stays behind
        in the old scope is detached to the root of the new one.
        """
        identity, node = self._load(identity, node_id)
        old_scope = Scope.of(node)

        if old_scope.is_org:
            new_scope = Scope.personal(identity.subject)
        elif org_id:
            new_scope = Scope.organization(org_id)
        else:
            raise InvalidStateError("An organization id is required to share a node", node_id=node_id)

        scope_fields = {"owner_id": new_scope.owner_id, "org_id": new_scope.org_id}
        subtree = list(TreeIndex(self.repo.list_scope(old_scope)).iter_subtree(node.id))

        fields = dict(scope_fields)
        if node.parent_id is not None:
            fields["parent_id"] = None
            fields["order"] = next_order(self.repo, new_scope, None)
        self.repo.patch(node.id, {**fields, **self._audit(identity, self.clock())})
        for descendant in subtree:
            self.repo.patch(descendant.id, scope_fields)

        self.db.commit()
        logger.info(
            "Toggled sharing",
            extra={"node_id": node_id, "org_id": new_scope.org_id, "subtree_size": len(subtree)},
        )
        return node
