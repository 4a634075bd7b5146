"""Activity feed schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class ActivityResponse(BaseModel):
    id: int
    type: str
    node_id: Optional[str] = None
    node_title: str
    node_type: Optional[str] = None
    user_id: str
    user_name: str
    org_id: Optional[str] = None
    details: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityCountResponse(BaseModel):
    count: int
