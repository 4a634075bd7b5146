"""Node schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, List, Literal, Optional


class NodeCreate(BaseModel):
    """Schema for creating an empty folder or document."""
    type: Literal["folder", "doc"]
    parent_id: Optional[str] = None
    title: str = ""
    org_id: Optional[str] = None

    @field_validator('title')
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()


class NodeCreateWithContent(BaseModel):
    """Schema for creating a document that already has content (e.g. an upload)."""
    parent_id: Optional[str] = None
    title: str = ""
    content: Any
    org_id: Optional[str] = None
    source_file: Optional[str] = None


class NodeCreated(BaseModel):
    id: str


class TitleUpdate(BaseModel):
    title: str


class IconUpdate(BaseModel):
    icon: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Literal["draft", "in_review", "final"]


class TagsUpdate(BaseModel):
    tag_ids: List[str]


class DescriptionUpdate(BaseModel):
    description: Any = None


class ContentUpdate(BaseModel):
    content: Any


class MoveRequest(BaseModel):
    """Re-parent a node; it is appended after its new siblings."""
    new_parent_id: Optional[str] = None


class ReorderRequest(BaseModel):
    """Place a node at an explicit slot of the destination bucket."""
    new_parent_id: Optional[str] = None
    new_order: int = Field(..., ge=0)


class SharingUpdate(BaseModel):
    """Omit org_id to move an organization node back to the caller's personal scope."""
    org_id: Optional[str] = None


class NodeResponse(BaseModel):
    """Schema for node response."""
    id: str
    type: str
    parent_id: Optional[str] = None
    title: str
    icon: Optional[str] = None
    order: int
    owner_id: Optional[str] = None
    org_id: Optional[str] = None
    content: Any = None
    description: Any = None
    status: Optional[str] = None
    tag_ids: List[str] = []
    current_major_version: Optional[int] = None
    current_minor_version: Optional[int] = None
    current_version_string: Optional[str] = None
    last_version_snapshot_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None

    class Config:
        from_attributes = True


class FolderStatsResponse(BaseModel):
    total_docs: int
    total_folders: int
    total_items: int
    estimated_words: int
    last_updated: datetime
    direct_children: int

    class Config:
        from_attributes = True


class ContributorResponse(BaseModel):
    user_id: str
    user_name: str
    doc_count: int
    last_activity: datetime
    created_docs: int = 0
    edited_docs: int = 0

    class Config:
        from_attributes = True


class DescendantItem(BaseModel):
    """One entry of a folder's table of contents. Folders carry nested children."""
    id: str
    type: str
    title: str
    icon: Optional[str] = None
    depth: int
    order: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_by_name: Optional[str] = None
    children: Optional[List["DescendantItem"]] = None


DescendantItem.model_rebuild()


class SearchHit(BaseModel):
    """Search result for link pickers."""
    id: str
    title: str
    icon: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
