"""API routers."""
from .monitors import router as monitors_router
from .groups import router as groups_router
from .channels import router as channels_router, subscriptions_router
from .incidents import router as incidents_router
from .status_pages import router as status_pages_router
from .status import router as status_router
from .public import router as public_router
from .push import router as push_router
from .probes import router as probes_router
from .badges import router as badges_router

__all__ = [
    "monitors_router",
    "groups_router",
    "channels_router",
    "subscriptions_router",
    "incidents_router",
    "status_pages_router",
    "status_router",
    "public_router",
    "push_router",
    "probes_router",
    "badges_router",
]
