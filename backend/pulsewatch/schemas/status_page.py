"""Status page CRUD schemas."""
from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field


class StatusPageCreate(BaseModel):
    """Schema for creating a status page."""
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    theme: Literal["light", "dark"] = "light"
    custom_css: Optional[str] = None
    public: bool = True
    monitor_ids: List[int] = []


class StatusPageUpdate(BaseModel):
    """Schema for updating a status page. ``monitor_ids``, when present,
    replaces the whole selection."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    theme: Optional[Literal["light", "dark"]] = None
    custom_css: Optional[str] = None
    public: Optional[bool] = None
    monitor_ids: Optional[List[int]] = None


class StatusPageResponse(BaseModel):
    """Schema for status page in admin responses."""
    id: int
    title: str
    slug: str
    description: Optional[str] = None
    theme: str
    custom_css: Optional[str] = None
    public: bool
    monitor_ids: List[int] = []
    created_at: datetime
