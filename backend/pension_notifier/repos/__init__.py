"""Repositories over the collaborator stores."""
from .policy import Policy, PolicyRepository
from .activity import ActivityRepository
from .pension import PensionRepository
from .device import DeviceRepository
from .notification_log import NotificationLogRepository

__all__ = [
    "Policy",
    "PolicyRepository",
    "ActivityRepository",
    "PensionRepository",
    "DeviceRepository",
    "NotificationLogRepository",
]
