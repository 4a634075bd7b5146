"""Node store: the transactional table of tree entities.

Every read helper that serves a listing goes through _base_query(), which
hides soft-deleted rows. The store carries no business rules; services
validate before calling insert/patch.
"""

import uuid
from typing import Any, List, Optional

from sqlalchemy.orm import Query

from ..exceptions import NodeNotFoundError
from ..models import Node, Scope
from .base import BaseRepository


def _parent_filter(parent_id: Optional[str]):
    if parent_id is None:
        return Node.parent_id.is_(None)
    return Node.parent_id == parent_id


def _scope_filter(scope: Scope):
    if scope.is_org:
        return Node.org_id == scope.org_id
    return (Node.owner_id == scope.owner_id) & Node.org_id.is_(None)


class NodeRepository(BaseRepository[Node]):
    """get / insert / patch primitives plus the scope and sibling queries."""

    model_class = Node
    not_found_error = NodeNotFoundError

    def _base_query(self) -> Query:
        """Exclude soft-deleted nodes from all default queries."""
        return self.db.query(Node).filter(Node.is_deleted.is_(False))

    # --- Primitives ---

    def get(self, node_id: str) -> Optional[Node]:
        """Fetch a node regardless of soft-delete status."""
        return self.db.query(Node).filter(Node.id == node_id).first()

    def insert(self, **fields: Any) -> Node:
        node = Node(id=self.generate_id(), **fields)
        self.db.add(node)
        self.db.flush()
        return node

    def patch(self, node_id: str, fields: dict) -> Node:
        node = self.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        for key, value in fields.items():
            setattr(node, key, value)
        self.db.flush()
        return node

    def compare_and_patch(self, node_id: str, expected_revision: int, fields: dict) -> bool:
        """Patch only if content_revision still equals *expected_revision*.

        The revision is bumped in the same UPDATE. Returns False when another
        writer got there first.
        """
        values = dict(fields)
        values["content_revision"] = expected_revision + 1
        matched = (
            self.db.query(Node)
            .filter(Node.id == node_id, Node.content_revision == expected_revision)
            .update(values, synchronize_session="fetch")
        )
        return matched == 1

    # --- Scope queries ---

    def list_scope(self, scope: Scope) -> List[Node]:
        return self._base_query().filter(_scope_filter(scope)).all()

    def list_docs(self, scope: Scope) -> List[Node]:
        return self._base_query().filter(_scope_filter(scope), Node.type == "doc").all()

    def get_children(self, scope: Scope, parent_id: Optional[str]) -> List[Node]:
        return (
            self._base_query()
            .filter(_scope_filter(scope), _parent_filter(parent_id))
            .order_by(Node.order, Node.created_at, Node.id)
            .all()
        )

    def get_last_sibling(self, scope: Scope, parent_id: Optional[str]) -> Optional[Node]:
        """Single highest-order sibling in the (scope, parent) bucket."""
        return (
            self._base_query()
            .filter(_scope_filter(scope), _parent_filter(parent_id))
            .order_by(Node.order.desc())
            .first()
        )

    def get_direct_children(self, parent_id: str) -> List[Node]:
        """Non-deleted children of *parent_id* in any scope."""
        return self._base_query().filter(Node.parent_id == parent_id).all()

    # --- Helpers ---

    @staticmethod
    def generate_id() -> str:
        return f"node-{uuid.uuid4().hex[:16]}"
