"""API routers."""
from .pensions import router as pensions_router
from .notification_settings import router as notification_settings_router
from .activity import router as activity_router
from .devices import router as devices_router
from .notifications import router as notifications_router

__all__ = [
    "pensions_router",
    "notification_settings_router",
    "activity_router",
    "devices_router",
    "notifications_router",
]
