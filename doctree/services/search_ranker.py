"""Title ranking for link pickers and quick search."""

from typing import Iterable, List

from ..models import Node


def _recency(node: Node):
    return node.last_touched_at


def rank_titles(docs: Iterable[Node], query: str, limit: int = 10) -> List[Node]:
    """Rank *docs* against *query*.

    Empty query: the most recently updated docs. Otherwise case-insensitive
    substring matches on the title, titles starting with the query first,
    most recent first within each group.
    """
    needle = query.strip().lower()
    docs = list(docs)

    if not needle:
        return sorted(docs, key=_recency, reverse=True)[:limit]

    matches = [d for d in docs if needle in (d.title or "").lower()]
    # Two stable sorts: recency first, then the prefix group on top.
    matches.sort(key=_recency, reverse=True)
    matches.sort(key=lambda d: not (d.title or "").lower().startswith(needle))
    return matches[:limit]
