"""Pydantic schemas for API request/response models."""
from .monitor import (
    MonitorCreate,
    MonitorUpdate,
    MonitorResponse,
    HistoryPoint,
    UptimeResponse,
)
from .group import GroupCreate, GroupUpdate, GroupResponse, GroupWithMonitorCount
from .channel import ChannelCreate, ChannelUpdate, ChannelResponse, SubscriptionRequest
from .incident import IncidentCreate, IncidentResponse, PublicIncident
from .status_page import StatusPageCreate, StatusPageUpdate, StatusPageResponse
from .status import (
    PublicMonitorStatus,
    DisplayGroupResponse,
    PageConfig,
    PublicStatusResponse,
    StatusOverview,
)
from .probe import ProbeResult, ProbeReport

__all__ = [
    "MonitorCreate",
    "MonitorUpdate",
    "MonitorResponse",
    "HistoryPoint",
    "UptimeResponse",
    "GroupCreate",
    "GroupUpdate",
    "GroupResponse",
    "GroupWithMonitorCount",
    "ChannelCreate",
    "ChannelUpdate",
    "ChannelResponse",
    "SubscriptionRequest",
    "IncidentCreate",
    "IncidentResponse",
    "PublicIncident",
    "StatusPageCreate",
    "StatusPageUpdate",
    "StatusPageResponse",
    "PublicMonitorStatus",
    "DisplayGroupResponse",
    "PageConfig",
    "PublicStatusResponse",
    "StatusOverview",
    "ProbeResult",
    "ProbeReport",
]
