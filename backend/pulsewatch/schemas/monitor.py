"""Monitor schemas for API."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.monitor_config import MIN_INTERVAL, MIN_TIMEOUT


class MonitorBase(BaseModel):
    """Fields shared by create requests and responses."""
    name: str = Field(..., min_length=1, max_length=255)
    type: str
    target: Optional[str] = None
    interval: int = Field(default=60, ge=MIN_INTERVAL)
    timeout: int = Field(default=10, ge=MIN_TIMEOUT)
    max_retries: int = Field(default=0, ge=0)
    enabled: bool = True
    group_id: Optional[int] = None

    # http-family
    expected_status: Optional[str] = None  # empty = any 2xx
    method: Optional[str] = None
    headers: Optional[str] = None  # JSON object string
    body: Optional[str] = None
    keyword: Optional[str] = None  # http_keyword
    json_path: Optional[str] = None  # http_json
    json_value: Optional[str] = None  # http_json


class MonitorCreate(MonitorBase):
    """Schema for creating a new monitor."""
    pass


class MonitorUpdate(BaseModel):
    """Schema for updating a monitor. Only fields present in the request are
    applied; everything else, including another type's fields, is kept."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    target: Optional[str] = None
    interval: Optional[int] = Field(None, ge=MIN_INTERVAL)
    timeout: Optional[int] = Field(None, ge=MIN_TIMEOUT)
    max_retries: Optional[int] = Field(None, ge=0)
    enabled: Optional[bool] = None
    group_id: Optional[int] = None
    expected_status: Optional[str] = None
    method: Optional[str] = None
    headers: Optional[str] = None
    body: Optional[str] = None
    keyword: Optional[str] = None
    json_path: Optional[str] = None
    json_value: Optional[str] = None


class MonitorResponse(MonitorBase):
    """Schema for monitor in API responses."""
    id: int
    name: str
    last_status: str = "unknown"
    last_checked_at: Optional[datetime] = None
    certificate_expiry: Optional[datetime] = None
    push_token: Optional[str] = None
    created_at: datetime

    @field_validator("last_status", mode="before")
    @classmethod
    def unknown_when_unset(cls, value):
        return value or "unknown"

    class Config:
        from_attributes = True


class HistoryPoint(BaseModel):
    """One check result, as delivered most-recent-first."""
    created_at: datetime
    response_time: int
    status: str

    class Config:
        from_attributes = True


class UptimeResponse(BaseModel):
    """Uptime over a trailing window; ``uptime`` is null when there is no data."""
    monitor_id: int
    window_hours: int
    uptime: Optional[float] = None
