"""Activity log: advisory audit trail of node creation and deletion.

Entries are immutable. Writing is best-effort: ``record`` runs after the
node mutation has committed and never raises, so a failing audit write can
neither block nor roll back the mutation it describes.

Usage in service layer:
    activity_service.record(db, type="doc_created", node=node, identity=identity)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import sqlalchemy.exc
from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from ..core.auth import Identity
from ..models import Activity, Node
from ..timeutils import utcnow

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(hours=24)


def record(
    db: Session,
    type: str,
    node: Node,
    identity: Identity,
    details: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Write an activity entry. Never raises; failures are logged and rolled back."""
    try:
        entry = Activity(
            type=type,
            node_id=node.id,
            node_title=node.title or "",
            node_type=node.type,
            user_id=identity.subject,
            user_name=identity.display_name,
            org_id=node.org_id,
            details=details,
            created_at=now or utcnow(),
        )
        db.add(entry)
        db.commit()
    except sqlalchemy.exc.SQLAlchemyError as e:
        logger.warning("Failed to write activity entry: %s", e, extra={"activity": type})
        db.rollback()


def _feed_filter(identity: Identity, org_id: Optional[str]):
    """One organization's entries, or the caller's own personal entries."""
    if org_id:
        return Activity.org_id == org_id
    return and_(Activity.org_id.is_(None), Activity.user_id == identity.subject)


def get_recent(
    db: Session,
    identity: Identity,
    org_id: Optional[str] = None,
    limit: int = 50,
) -> list[Activity]:
    """Newest entries first from the feed ``_feed_filter`` selects."""
    return (
        db.query(Activity)
        .filter(_feed_filter(identity, org_id))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )


def count_recent(
    db: Session,
    identity: Identity,
    org_id: Optional[str] = None,
    since: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> int:
    """Entries created at or after *since* (default: the last 24 hours)."""
    if since is None:
        since = (now or utcnow()) - RECENT_WINDOW
    return (
        db.query(func.count(Activity.id))
        .filter(_feed_filter(identity, org_id), Activity.created_at >= since)
        .scalar()
    )


def get_by_node(db: Session, node_id: str, limit: int = 50) -> list[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.node_id == node_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )
