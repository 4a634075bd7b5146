"""Access decisions for nodes. Pure functions.

This is the ONE place where node visibility rules are defined:
    - owner match:  node.owner_id equals the acting subject
    - has org:      node.org_id is set; organization membership itself is
                    asserted by the identity provider's session, not checked here

Queries use ``can_access`` and degrade to None/empty. Mutations use
``require_identity`` and ``check_node_access`` which raise.
"""

from __future__ import annotations

from typing import Optional

from ..core.auth import Identity
from ..exceptions import AuthenticationError, ForbiddenError, NodeNotFoundError
from ..models import Node, Scope


def can_access(identity: Optional[Identity], node: Optional[Node]) -> bool:
    """Whether *identity* may read or write *node*."""
    if identity is None or node is None:
        return False
    return node.owner_id == identity.subject or node.org_id is not None


def is_visible(identity: Optional[Identity], node: Optional[Node]) -> bool:
    """Accessible and not soft-deleted."""
    return node is not None and not node.is_deleted and can_access(identity, node)


def require_identity(identity: Optional[Identity]) -> Identity:
    """Reject mutations from unauthenticated callers."""
    if identity is None:
        raise AuthenticationError()
    return identity


def check_node_access(identity: Identity, node: Optional[Node], node_id: str) -> Node:
    """Validate a freshly loaded node for a mutation.

    Raises NodeNotFoundError for missing or soft-deleted nodes and
    ForbiddenError when the identity may not touch it.
    """
    if node is None or node.is_deleted:
        raise NodeNotFoundError(node_id)
    if not can_access(identity, node):
        raise ForbiddenError()
    return node


def scope_for(identity: Identity, org_id: Optional[str] = None) -> Scope:
    """Organization scope when *org_id* is given, else the caller's personal scope."""
    if org_id:
        return Scope.organization(org_id)
    return Scope.personal(identity.subject)
