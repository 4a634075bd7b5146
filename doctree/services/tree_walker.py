"""Descendant traversals over an in-memory arena of one scope's nodes.

A ``TreeIndex`` is built from every non-deleted node of a scope and indexes
children by parent id. All walks use an explicit stack or queue, never
recursion:

    folder_stats         -- depth-first, counts docs/folders/words
    folder_contributors  -- depth-first, folds descendant docs by last editor
    descendants          -- breadth-first per level, bounded by max_depth
    ancestors            -- parent chain, used for cycle detection
    cascade_targets      -- direct children removed along with a node

Soft-deleted nodes are absent from the arena, so a deleted folder hides its
whole subtree from these walks.
"""

from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional

from ..models import Node
from ..repositories.node_repository import NodeRepository
from .content_text import TextExtractor, count_words, extract_text


class TreeIndex:
    """Arena of nodes plus a parent-id → children index."""

    def __init__(self, nodes: Iterable[Node]):
        self.nodes: Dict[str, Node] = {}
        self.children_by_parent: Dict[Optional[str], List[Node]] = defaultdict(list)
        for node in nodes:
            self.nodes[node.id] = node
            self.children_by_parent[node.parent_id].append(node)
        for children in self.children_by_parent.values():
            children.sort(key=lambda n: (n.order, n.created_at, n.id))

    def get(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def children(self, parent_id: Optional[str]) -> List[Node]:
        return self.children_by_parent.get(parent_id, [])

    def iter_subtree(self, root_id: str) -> Iterator[Node]:
        """Every descendant of *root_id* (excluding the root), depth-first pre-order."""
        stack = list(reversed(self.children(root_id)))
        seen = {root_id}
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            yield node
            if node.is_folder:
                stack.extend(reversed(self.children(node.id)))

    def ancestors(self, node_id: Optional[str]) -> Iterator[Node]:
        """*node_id* itself followed by its parent chain up to the root."""
        seen = set()
        current = self.get(node_id) if node_id else None
        while current is not None and current.id not in seen:
            seen.add(current.id)
            yield current
            current = self.get(current.parent_id) if current.parent_id else None


@dataclass
class FolderStats:
    total_docs: int
    total_folders: int
    total_items: int
    estimated_words: int
    last_updated: datetime
    direct_children: int


def folder_stats(
    index: TreeIndex, folder: Node, extractor: TextExtractor = extract_text
) -> FolderStats:
    """Aggregate counts over the folder's whole subtree.

    ``last_updated`` only looks at the folder and its direct children.
    """
    docs = folders = words = 0
    for node in index.iter_subtree(folder.id):
        if node.is_doc:
            docs += 1
            if node.content:
                words += count_words(extractor(node.content))
        else:
            folders += 1

    direct = index.children(folder.id)
    last_updated = folder.last_touched_at
    for child in direct:
        if child.last_touched_at > last_updated:
            last_updated = child.last_touched_at

    return FolderStats(
        total_docs=docs,
        total_folders=folders,
        total_items=docs + folders,
        estimated_words=words,
        last_updated=last_updated,
        direct_children=len(direct),
    )


@dataclass
class Contributor:
    user_id: str
    user_name: str
    doc_count: int
    last_activity: datetime
    created_docs: int = 0
    edited_docs: int = 0


def folder_contributors(index: TreeIndex, folder_id: str, limit: int = 8) -> List[Contributor]:
    """Last editors of the folder's descendant docs, most recently active first."""
    by_user: Dict[str, Contributor] = {}
    for node in index.iter_subtree(folder_id):
        if not node.is_doc:
            continue
        if not (node.updated_by and node.updated_by_name and node.updated_at):
            continue
        existing = by_user.get(node.updated_by)
        if existing:
            existing.doc_count += 1
            existing.edited_docs += 1
            if node.updated_at > existing.last_activity:
                existing.last_activity = node.updated_at
        else:
            by_user[node.updated_by] = Contributor(
                user_id=node.updated_by,
                user_name=node.updated_by_name,
                doc_count=1,
                last_activity=node.updated_at,
                edited_docs=1,
            )

    ranked = sorted(by_user.values(), key=lambda c: c.last_activity, reverse=True)
    return ranked[:limit]


def _toc_item(node: Node, depth: int) -> dict:
    item = {
        "id": node.id,
        "type": node.type,
        "title": node.title,
        "icon": node.icon,
        "depth": depth,
        "order": node.order,
        "created_at": node.created_at,
        "updated_at": node.updated_at,
        "updated_by": node.updated_by,
        "updated_by_name": node.updated_by_name,
    }
    if node.is_folder:
        item["children"] = []
    return item


def descendants(index: TreeIndex, folder_id: str, max_depth: int = 3) -> List[dict]:
    """Nested table of contents below *folder_id*.

    Direct children sit at depth 0. Levels are expanded breadth-first; a
    folder at ``max_depth`` is listed with an empty ``children`` array.
    """
    root: List[dict] = []
    if max_depth < 0:
        return root

    queue = deque([(folder_id, 0, root)])
    seen = {folder_id}
    while queue:
        parent_id, depth, target = queue.popleft()
        for child in index.children(parent_id):
            if child.id in seen:
                continue
            seen.add(child.id)
            item = _toc_item(child, depth)
            target.append(item)
            if child.is_folder and depth < max_depth:
                queue.append((child.id, depth + 1, item["children"]))
    return root


def cascade_targets(repo: NodeRepository, node: Node) -> List[Node]:
    """Nodes soft-deleted together with *node*: its non-deleted direct children.

    One level only. Grandchildren keep their rows but drop out of every walk,
    since their parent is no longer in the arena.
    """
    if not node.is_folder:
        return []
    return repo.get_direct_children(node.id)
