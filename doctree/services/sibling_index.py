"""Sibling ordering within a (scope, parent) bucket.

Three operations:
    next_order   -- order for a newly created node (after all siblings)
    append_order -- order for a node moved into a bucket without a position
    plan_reorder -- contiguous renumbering with the moved node at a given slot

plan_reorder is a pure function; the caller applies the plan inside its
transaction.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import Node, Scope
from ..repositories.node_repository import NodeRepository


def next_order(repo: NodeRepository, scope: Scope, parent_id: Optional[str]) -> int:
    """Order for a new node: one past the highest sibling, or 0 in an empty bucket.

    Reads only the single last sibling instead of scanning the bucket.
    """
    last = repo.get_last_sibling(scope, parent_id)
    return 0 if last is None else last.order + 1


def append_order(siblings: Iterable[Node]) -> int:
    """Order that places a node after every node in *siblings*."""
    return max((s.order for s in siblings), default=-1) + 1


@dataclass
class ReorderPlan:
    """Outcome of a reorder: the moved node's slot and the sibling writes."""

    target_order: int
    updates: List[Tuple[Node, int]] = field(default_factory=list)


def _sort_key(node: Node):
    return (node.order, node.created_at, node.id)


def plan_reorder(siblings: Sequence[Node], moving_id: str, new_order: int) -> ReorderPlan:
    """Renumber a bucket so the moving node lands at *new_order*.

    The other siblings are sorted by their current order and reassigned
    0..N-1, skipping the target slot. *new_order* is clamped to
    [0, number of other siblings], so asking for a slot past the end puts
    the node last instead of leaving a gap. Only siblings whose order
    actually changes appear in ``updates``.
    """
    others = sorted((s for s in siblings if s.id != moving_id), key=_sort_key)
    target = max(0, min(new_order, len(others)))

    plan = ReorderPlan(target_order=target)
    counter = 0
    for sibling in others:
        if counter == target:
            counter += 1
        if sibling.order != counter:
            plan.updates.append((sibling, counter))
        counter += 1
    return plan
