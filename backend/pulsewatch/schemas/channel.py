"""Notification channel and subscription schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ChannelCreate(BaseModel):
    """Schema for creating a channel. ``config`` is a JSON document as a string."""
    name: str = Field(..., min_length=1, max_length=255)
    type: str
    config: str
    enabled: bool = True


class ChannelUpdate(BaseModel):
    """Schema for updating a channel."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    config: Optional[str] = None
    enabled: Optional[bool] = None


class ChannelResponse(BaseModel):
    """Schema for channel in API responses."""
    id: int
    name: str
    type: str
    config: str
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionRequest(BaseModel):
    """Link or unlink a channel to a monitor."""
    monitor_id: int
    channel_id: int
