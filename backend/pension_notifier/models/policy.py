"""NotificationPolicy model - per-user expiry alert preferences."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean

from ..database import Base

# Lead time used when a user never picked one
DEFAULT_DAYS_BEFORE = 3
DEFAULT_ACTIVE_HOURS_START = "08:00"
DEFAULT_ACTIVE_HOURS_END = "22:00"
DEFAULT_SEND_TIME = "09:00"
DEFAULT_TIMEZONE = "America/Mexico_City"


class NotificationPolicy(Base):
    """Notification settings for a single user."""

    __tablename__ = "user_notification_settings"

    user_id = Column(String, primary_key=True)
    enabled = Column(Boolean, nullable=False, default=True)
    days_before = Column(Integer, nullable=True, default=DEFAULT_DAYS_BEFORE)
    active_hours_start = Column(String, nullable=True, default=DEFAULT_ACTIVE_HOURS_START)  # HH:MM
    active_hours_end = Column(String, nullable=True, default=DEFAULT_ACTIVE_HOURS_END)  # HH:MM
    allow_weekends = Column(Boolean, nullable=True, default=True)
    send_time = Column(String, nullable=True, default=DEFAULT_SEND_TIME)
    timezone = Column(String, nullable=True, default=DEFAULT_TIMEZONE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
