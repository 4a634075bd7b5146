"""Plain-text extraction from opaque rich-text payloads.

The tree engine never interprets document content itself; word counts go
through a ``TextExtractor`` supplied by whoever owns the content schema.
``extract_text`` is the default and understands editor JSON of the shape
``{"type": ..., "text": ..., "content": [child, ...]}``.
"""

import re
from typing import Any, Callable

TextExtractor = Callable[[Any], str]

_WHITESPACE = re.compile(r"\s+")


def extract_text(content: Any) -> str:
    """Concatenate every text fragment in *content*, space separated.

    Walks the payload with an explicit stack so deeply nested documents
    cannot exhaust the interpreter's recursion limit.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content

    pieces: list[str] = []
    stack: list[Any] = [content]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            pieces.append(item)
        elif isinstance(item, list):
            stack.extend(reversed(item))
        elif isinstance(item, dict):
            text = item.get("text")
            if isinstance(text, str):
                pieces.append(text)
            children = item.get("content")
            if isinstance(children, list):
                stack.extend(reversed(children))
    return " ".join(pieces)


def count_words(text: str) -> int:
    return len([word for word in _WHITESPACE.split(text.strip()) if word])
