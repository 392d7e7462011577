"""Notification settings, activity, device and log schemas for API."""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..utils.time_utils import parse_hhmm
from .pension import CamelModel


class ActiveHours(BaseModel):
    """Window of the day in which notifications may be sent."""
    start: str = "08:00"
    end: str = "22:00"


class ActiveHoursUpdate(BaseModel):
    """Either bound may be omitted to keep the stored value."""
    start: Optional[str] = None
    end: Optional[str] = None


class NotificationSettingsResponse(CamelModel):
    """A user's notification policy."""
    user_id: str
    enabled: bool
    days_before: int
    send_time: Optional[str] = None
    timezone: Optional[str] = None
    active_hours: ActiveHours
    allow_weekends: bool
    updated_at: Optional[datetime] = None


class NotificationSettingsUpdate(CamelModel):
    """Partial update of a user's notification policy."""
    enabled: Optional[bool] = None
    days_before: Optional[int] = Field(None, ge=0, le=365)
    send_time: Optional[str] = None
    timezone: Optional[str] = None
    active_hours: Optional[ActiveHoursUpdate] = None
    allow_weekends: Optional[bool] = None

    @field_validator("active_hours")
    @classmethod
    def check_hours(cls, value: Optional[ActiveHoursUpdate]):
        if value is not None:
            for bound in (value.start, value.end):
                if bound is not None:
                    parse_hhmm(bound)
        return value


class ActivityHeartbeat(CamelModel):
    """Sent by the client whenever the app is loaded or used."""
    email: Optional[str] = None
    user_agent: Optional[str] = None


class ActivityStatus(CamelModel):
    user_id: str
    active: bool
    last_active_at: Optional[datetime] = None


class DeviceRegisterRequest(CamelModel):
    """Request to register a device for push notifications."""
    user_id: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    email: Optional[str] = None
    user_agent: Optional[str] = None
    platform: Optional[str] = None
    language: Optional[str] = None


class DeviceRegisterResponse(BaseModel):
    """Response after registering a device."""
    success: bool
    user_id: str
    message: str


class DeviceUnregisterResponse(BaseModel):
    """Response after unregistering a device."""
    success: bool
    message: str


class NotificationLogResponse(CamelModel):
    id: int
    user_id: str
    user_email: Optional[str] = None
    pension_id: int
    pension_name: str
    expiration_date: date
    sent_at: datetime
    success_count: int
    failure_count: int
    message: Optional[str] = None


class RunSummaryResponse(CamelModel):
    """Counters from a scheduler run."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    aborted: bool
    active_users: int
    skipped_by_policy: int
    skipped_no_tokens: int
    skipped_no_matches: int
    users_notified: int
    messages_sent: int
    messages_failed: int
    user_errors: int
