"""Node API endpoints.

The acting identity always comes from the bearer token, never from the
request body. Queries answer 404 / empty lists rather than revealing that a
node exists; mutations surface the service's DocTreeException.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..core.auth import Identity, optional_identity
from ..database import get_db
from ..exceptions import NodeNotFoundError
from ..schemas.node import (
    ContentUpdate,
    ContributorResponse,
    DescendantItem,
    DescriptionUpdate,
    FolderStatsResponse,
    IconUpdate,
    MoveRequest,
    NodeCreate,
    NodeCreateWithContent,
    NodeCreated,
    NodeResponse,
    ReorderRequest,
    SearchHit,
    SharingUpdate,
    StatusUpdate,
    TagsUpdate,
    TitleUpdate,
)
from ..services import NodeService

router = APIRouter(prefix="/api/nodes", tags=["nodes"])


@router.get("", response_model=List[NodeResponse])
def list_nodes(
    org_id: Optional[str] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Non-deleted nodes of the organization, or of the caller's personal scope."""
    return NodeService(db).list(identity, org_id)


@router.get("/personal", response_model=List[NodeResponse])
def list_personal_nodes(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).list_personal(identity)


@router.get("/organization/{org_id}", response_model=List[NodeResponse])
def list_organization_nodes(
    org_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).list_organization(identity, org_id)


@router.get("/children", response_model=List[NodeResponse])
def get_children(
    parent_id: Optional[str] = None,
    org_id: Optional[str] = None,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Direct children of *parent_id*, or the scope's roots when omitted."""
    return NodeService(db).get_children(identity, parent_id, org_id)


@router.get("/search", response_model=List[SearchHit])
def search_nodes(
    q: str = "",
    org_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Title search over personal docs plus, optionally, one organization's."""
    return NodeService(db).search(identity, q, org_id, limit)


@router.post("", response_model=NodeCreated, status_code=201)
def create_node(
    data: NodeCreate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    node_id = NodeService(db).create(identity, data.type, data.parent_id, data.title, data.org_id)
    return NodeCreated(id=node_id)


@router.post("/with-content", response_model=NodeCreated, status_code=201)
def create_node_with_content(
    data: NodeCreateWithContent,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    node_id = NodeService(db).create_with_content(
        identity, data.parent_id, data.title, data.content, data.org_id, data.source_file
    )
    return NodeCreated(id=node_id)


@router.get("/{node_id}", response_model=NodeResponse)
def get_node(
    node_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    node = NodeService(db).get(identity, node_id)
    if node is None:
        raise NodeNotFoundError(node_id)
    return node


@router.put("/{node_id}/title", response_model=NodeResponse)
def update_title(
    node_id: str,
    data: TitleUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).update_title(identity, node_id, data.title)


@router.put("/{node_id}/icon", response_model=NodeResponse)
def update_icon(
    node_id: str,
    data: IconUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).update_icon(identity, node_id, data.icon)


@router.put("/{node_id}/status", response_model=NodeResponse)
def update_status(
    node_id: str,
    data: StatusUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).update_status(identity, node_id, data.status)


@router.put("/{node_id}/tags", response_model=NodeResponse)
def update_tags(
    node_id: str,
    data: TagsUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).update_tags(identity, node_id, data.tag_ids)


@router.put("/{node_id}/description", response_model=NodeResponse)
def update_description(
    node_id: str,
    data: DescriptionUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).update_description(identity, node_id, data.description)


@router.put("/{node_id}/content", response_model=NodeResponse)
def update_content(
    node_id: str,
    data: ContentUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Save doc content. May freeze the previous content as a version."""
    return NodeService(db).update_content(identity, node_id, data.content)


@router.put("/{node_id}/move", response_model=NodeResponse)
def move_node(
    node_id: str,
    data: MoveRequest,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).move(identity, node_id, data.new_parent_id)


@router.put("/{node_id}/reorder", response_model=NodeResponse)
def reorder_node(
    node_id: str,
    data: ReorderRequest,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).reorder(identity, node_id, data.new_parent_id, data.new_order)


@router.put("/{node_id}/sharing", response_model=NodeResponse)
def toggle_sharing(
    node_id: str,
    data: SharingUpdate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).toggle_sharing(identity, node_id, data.org_id)


@router.delete("/{node_id}", status_code=204)
def delete_node(
    node_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Soft-delete the node and its direct children."""
    NodeService(db).remove(identity, node_id)
    return Response(status_code=204)


@router.get("/{node_id}/stats", response_model=FolderStatsResponse)
def get_folder_stats(
    node_id: str,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    stats = NodeService(db).get_folder_stats(identity, node_id)
    if stats is None:
        raise NodeNotFoundError(node_id)
    return stats


@router.get("/{node_id}/contributors", response_model=List[ContributorResponse])
def get_folder_contributors(
    node_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    return NodeService(db).get_folder_contributors(identity, node_id, limit)


@router.get("/{node_id}/descendants", response_model=List[DescendantItem])
def get_descendants(
    node_id: str,
    max_depth: Optional[int] = Query(None, ge=0, le=20),
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(optional_identity),
):
    """Nested table of contents below a folder."""
    return NodeService(db).get_descendants(identity, node_id, max_depth)
