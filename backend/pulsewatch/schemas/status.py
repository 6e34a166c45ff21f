"""Status read-models for the public page and the admin dashboard."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from .incident import PublicIncident


class PublicMonitorStatus(BaseModel):
    """A monitor as exposed on a status page."""
    id: int
    name: str
    type: str
    last_status: str
    last_checked_at: Optional[datetime] = None
    uptime_24h: Optional[float] = None  # null = no data in window
    certificate_expiry: Optional[datetime] = None
    group_name: Optional[str] = None


class DisplayGroupResponse(BaseModel):
    """A display section: a named group or "Other Services"."""
    name: str
    monitor_ids: List[int]


class PageConfig(BaseModel):
    """Presentation metadata of a named status page."""
    id: int
    title: str
    description: Optional[str] = None
    theme: str
    custom_css: Optional[str] = None
    slug: str


class PublicStatusResponse(BaseModel):
    """Public status page payload. Presentation fields come from the page,
    or defaults for the implicit all-monitors page."""
    title: str
    description: Optional[str] = None
    theme: str = "light"
    custom_css: Optional[str] = None
    system_status: str  # operational, degraded
    monitors: List[PublicMonitorStatus]
    groups: List[DisplayGroupResponse]
    config: Optional[PageConfig] = None


class StatusOverview(BaseModel):
    """Admin dashboard overview data."""
    system_status: str
    total_monitors: int
    monitors_up: int
    monitors_down: int
    monitors_unknown: int
    monitors: List[PublicMonitorStatus]
    groups: List[DisplayGroupResponse]
    active_incidents: List[PublicIncident]
