"""Database models."""
from .pension import Pension
from .policy import NotificationPolicy
from .activity import UserActivity
from .device_token import DeviceToken
from .notification_log import NotificationLog

__all__ = ["Pension", "NotificationPolicy", "UserActivity", "DeviceToken", "NotificationLog"]
