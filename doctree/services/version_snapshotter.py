"""Batching policy for automatic version snapshots.

Editors autosave every few seconds. Freezing a version on every save would
flood the history, so saves are grouped by a time window:

    1. No existing content (first save): initialise the cursor to v1.0,
       no snapshot.
    2. Existing content and the window since the last snapshot has elapsed:
       freeze the *previous* content and title as the next minor version.
    3. Otherwise: write the new content, leave the cursor alone.

``plan_content_write`` only decides. NodeService applies the plan and the
new content in one compare-and-swap on ``Node.content_revision``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from ..models import Node

INITIAL_MAJOR = 1
INITIAL_MINOR = 0


def format_version(major: int, minor: int) -> str:
    return f"v{major}.{minor}"


def has_content(content: Any) -> bool:
    return content is not None and content != ""


@dataclass(frozen=True)
class SnapshotPlan:
    create_snapshot: bool
    cursor_changed: bool
    major: int
    minor: int

    @property
    def version_string(self) -> str:
        return format_version(self.major, self.minor)

    def cursor_fields(self, now: datetime) -> dict:
        """Node columns to write alongside the content, empty when the cursor stays."""
        if not self.cursor_changed:
            return {}
        return {
            "current_major_version": self.major,
            "current_minor_version": self.minor,
            "current_version_string": self.version_string,
            "last_version_snapshot_at": now,
        }


def window_elapsed(last_snapshot_at: Optional[datetime], now: datetime, window: timedelta) -> bool:
    if last_snapshot_at is None:
        return True
    return now - last_snapshot_at > window


def plan_content_write(node: Node, now: datetime, window: timedelta) -> SnapshotPlan:
    """Decide what a content save at *now* does to the version history."""
    major = node.current_major_version if node.current_major_version is not None else INITIAL_MAJOR
    minor = node.current_minor_version if node.current_minor_version is not None else INITIAL_MINOR

    if has_content(node.content) and window_elapsed(node.last_version_snapshot_at, now, window):
        return SnapshotPlan(create_snapshot=True, cursor_changed=True, major=major, minor=minor + 1)

    if not node.current_version_string:
        return SnapshotPlan(
            create_snapshot=False, cursor_changed=True, major=INITIAL_MAJOR, minor=INITIAL_MINOR
        )

    return SnapshotPlan(create_snapshot=False, cursor_changed=False, major=major, minor=minor)


def initial_cursor(now: datetime) -> dict:
    """Cursor columns for a doc created with content."""
    return {
        "current_major_version": INITIAL_MAJOR,
        "current_minor_version": INITIAL_MINOR,
        "current_version_string": format_version(INITIAL_MAJOR, INITIAL_MINOR),
        "last_version_snapshot_at": now,
    }
