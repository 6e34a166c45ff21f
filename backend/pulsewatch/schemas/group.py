"""Monitor group schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class GroupCreate(BaseModel):
    """Schema for creating a group."""
    name: str = Field(..., min_length=1, max_length=255)
    order: int = 0


class GroupUpdate(BaseModel):
    """Schema for updating a group."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    order: Optional[int] = None


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: int
    name: str
    order: int
    created_at: datetime

    class Config:
        from_attributes = True


class GroupWithMonitorCount(GroupResponse):
    """Group with count of member monitors."""
    monitor_count: int = 0
