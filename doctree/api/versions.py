"""Version API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import Identity, optional_identity
from ..database import get_db
from ..exceptions import NodeNotFoundError, VersionNotFoundError
from ..schemas.version import CurrentVersionResponse, MajorVersionRequest, VersionResponse
from ..services import VersionService

router = APIRouter(prefix="/api/nodes/{doc_id}/versions", tags=["versions"])
version_router = APIRouter(prefix="/api/versions", tags=["versions"])


def _verify_doc_read(service: VersionService, identity: Optional[Identity], doc_id: str) -> dict:
    """Current cursor of the document. Raises 404 when the caller cannot see it."""
    current = service.get_current_version(identity, doc_id)
    if current is None:
        raise NodeNotFoundError(doc_id)
    return current


@router.get("", response_model=List[VersionResponse])
def list_versions(
    doc_id: str,
    limit: Optional[int] = Query(None, ge=1, le=200),
    only_major: bool = False,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Version history for a document, newest first."""
    service = VersionService(db)
    _verify_doc_read(service, identity, doc_id)
    return service.get_version_history(identity, doc_id, limit, only_major)


@router.get("/current", response_model=CurrentVersionResponse)
def get_current_version(
    doc_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return _verify_doc_read(VersionService(db), identity, doc_id)


@router.post("/major", response_model=VersionResponse, status_code=201)
def bump_major_version(
    doc_id: str,
    data: MajorVersionRequest,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Freeze the current content as the next major version."""
    return VersionService(db).bump_major_version(identity, doc_id, data.change_summary)


@version_router.get("/{version_id}", response_model=VersionResponse)
def get_version(
    version_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    version = VersionService(db).get_version(identity, version_id)
    if version is None:
        raise VersionNotFoundError(version_id)
    return version
