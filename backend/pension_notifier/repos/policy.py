"""Repository for per-user notification policies."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.policy import (
    NotificationPolicy,
    DEFAULT_DAYS_BEFORE,
    DEFAULT_ACTIVE_HOURS_START,
    DEFAULT_ACTIVE_HOURS_END,
    DEFAULT_SEND_TIME,
    DEFAULT_TIMEZONE,
)

logger = logging.getLogger(__name__)

# Columns a user may change through the settings screen
EDITABLE_FIELDS = (
    "enabled",
    "days_before",
    "active_hours_start",
    "active_hours_end",
    "allow_weekends",
    "send_time",
    "timezone",
)


@dataclass(frozen=True)
class Policy:
    """Fully populated notification policy with defaults merged in."""
    user_id: str
    enabled: bool = True
    days_before: int = DEFAULT_DAYS_BEFORE
    active_hours_start: str = DEFAULT_ACTIVE_HOURS_START
    active_hours_end: str = DEFAULT_ACTIVE_HOURS_END
    allow_weekends: bool = True
    send_time: str = DEFAULT_SEND_TIME
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_record(cls, record: NotificationPolicy) -> "Policy":
        # A lead time of 0 is treated like a missing one
        days_before = record.days_before or DEFAULT_DAYS_BEFORE
        return cls(
            user_id=record.user_id,
            enabled=bool(record.enabled),
            days_before=days_before,
            active_hours_start=record.active_hours_start if record.active_hours_start is not None else DEFAULT_ACTIVE_HOURS_START,
            active_hours_end=record.active_hours_end if record.active_hours_end is not None else DEFAULT_ACTIVE_HOURS_END,
            allow_weekends=True if record.allow_weekends is None else bool(record.allow_weekends),
            send_time=record.send_time or DEFAULT_SEND_TIME,
            timezone=record.timezone or DEFAULT_TIMEZONE,
        )


class PolicyRepository:
    """Reads and writes NotificationPolicy rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[NotificationPolicy]:
        result = await self.db.execute(
            select(NotificationPolicy).where(NotificationPolicy.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def resolve(self, user_id: str) -> Optional[Policy]:
        """Return the user's policy with defaults applied, or None if never configured."""
        record = await self.get(user_id)
        if record is None:
            return None
        return Policy.from_record(record)

    async def get_or_create(self, user_id: str) -> NotificationPolicy:
        """Return the user's policy, creating one with defaults on first access."""
        record = await self.get(user_id)
        if record:
            return record

        record = NotificationPolicy(
            user_id=user_id,
            enabled=True,
            days_before=DEFAULT_DAYS_BEFORE,
            active_hours_start=DEFAULT_ACTIVE_HOURS_START,
            active_hours_end=DEFAULT_ACTIVE_HOURS_END,
            allow_weekends=True,
            send_time=DEFAULT_SEND_TIME,
            timezone=DEFAULT_TIMEZONE,
        )
        self.db.add(record)
        await self.db.flush()
        logger.info(f"Created default notification settings for user {user_id}")
        return record

    async def put(self, user_id: str, **fields) -> NotificationPolicy:
        """Merge the given fields into the user's policy. None values are ignored."""
        record = await self.get_or_create(user_id)
        for key, value in fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(record, key, value)
        await self.db.flush()
        return record
