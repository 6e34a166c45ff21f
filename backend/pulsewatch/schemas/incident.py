"""Incident schemas."""
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, Field


class IncidentCreate(BaseModel):
    """Schema for opening an incident."""
    title: str = Field(..., min_length=1, max_length=255)
    impact: Literal["critical", "major", "minor", "maintenance"]
    monitor_id: Optional[int] = None


class IncidentResponse(BaseModel):
    """Schema for incident in admin responses."""
    id: int
    title: str
    status: str
    impact: str
    monitor_id: Optional[int] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PublicIncident(BaseModel):
    """Incident as shown on public pages."""
    id: int
    title: str
    status: str
    impact: str
    start_time: datetime
    created_at: datetime

    class Config:
        from_attributes = True
