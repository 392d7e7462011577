"""Pydantic schemas for API request/response models."""
from .pension import (
    PensionCreate,
    PensionUpdate,
    PensionRenew,
    PensionResponse,
    PensionStats,
)
from .notifications import (
    ActiveHours,
    ActiveHoursUpdate,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ActivityHeartbeat,
    ActivityStatus,
    DeviceRegisterRequest,
    DeviceRegisterResponse,
    DeviceUnregisterResponse,
    NotificationLogResponse,
    RunSummaryResponse,
)

__all__ = [
    "PensionCreate",
    "PensionUpdate",
    "PensionRenew",
    "PensionResponse",
    "PensionStats",
    "ActiveHours",
    "ActiveHoursUpdate",
    "NotificationSettingsResponse",
    "NotificationSettingsUpdate",
    "ActivityHeartbeat",
    "ActivityStatus",
    "DeviceRegisterRequest",
    "DeviceRegisterResponse",
    "DeviceUnregisterResponse",
    "NotificationLogResponse",
    "RunSummaryResponse",
]
