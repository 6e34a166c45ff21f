"""Database models."""
from .status_page import StatusPage, status_page_monitors
from .monitor_group import MonitorGroup
from .monitor import Monitor
from .check_result import CheckResult
from .incident import Incident
from .notification_channel import NotificationChannel, subscriptions

__all__ = [
    "StatusPage",
    "status_page_monitors",
    "MonitorGroup",
    "Monitor",
    "CheckResult",
    "Incident",
    "NotificationChannel",
    "subscriptions",
]
