"""Version schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional


class VersionResponse(BaseModel):
    """Schema for version response."""
    id: str
    doc_id: str
    major_version: int
    minor_version: int
    version_string: str
    content: Any = None
    title: str
    created_at: datetime
    created_by: str
    created_by_name: str
    is_major_version: bool
    change_summary: Optional[str] = None

    class Config:
        from_attributes = True


class CurrentVersionResponse(BaseModel):
    doc_id: str
    major_version: int
    minor_version: int
    version_string: str
    last_version_snapshot_at: Optional[datetime] = None


class MajorVersionRequest(BaseModel):
    change_summary: Optional[str] = None
