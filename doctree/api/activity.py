"""Activity feed endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Identity, optional_identity
from ..core.config import settings
from ..database import get_db
from ..schemas.activity import ActivityCountResponse, ActivityResponse
from ..services import activity_service
from ..timeutils import to_naive_utc

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.get("", response_model=List[ActivityResponse])
def get_recent_activity(
    org_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Newest entries of one organization, or the caller's personal entries.

    Empty for unauthenticated callers.
    """
    if identity is None:
        return []
    return activity_service.get_recent(db, identity, org_id, limit or settings.activity_feed_limit)


@router.get("/count", response_model=ActivityCountResponse)
def count_recent_activity(
    org_id: Optional[str] = None,
    since: Optional[datetime] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Number of feed entries since *since* (default: the last 24 hours)."""
    if identity is None:
        return {"count": 0}
    since = to_naive_utc(since) if since else None
    return {"count": activity_service.count_recent(db, identity, org_id, since)}
