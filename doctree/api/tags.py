"""Tag API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Identity, optional_identity
from ..database import get_db
from ..schemas.tag import TagCreate, TagResponse
from ..services import TagService

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagResponse])
def list_tags(
    search: Optional[str] = None,
    ids: Optional[List[str]] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Tags by usage, or exactly the tags named by repeated ``ids`` parameters."""
    service = TagService(db)
    if ids:
        return service.get_by_ids(ids)
    return service.list_tags(search, limit)


@router.post("", response_model=TagResponse, status_code=201)
def create_tag(
    data: TagCreate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Return the tag with this name, creating it if needed."""
    return TagService(db).get_or_create(identity, data.name)
