"""Tag schemas."""

from pydantic import BaseModel, Field
from datetime import datetime


class TagCreate(BaseModel):
    name: str = Field(..., max_length=100)


class TagResponse(BaseModel):
    id: str
    name: str
    display_name: str
    usage_count: int
    created_at: datetime

    class Config:
        from_attributes = True
