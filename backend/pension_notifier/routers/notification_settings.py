"""Notification settings API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.policy import NotificationPolicy
from ..repos.policy import PolicyRepository
from ..schemas.notifications import (
    ActiveHours,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
)
from ..utils.db_utils import retry_on_lock

router = APIRouter(prefix="/api/notification-settings", tags=["notification-settings"])


def _build_settings_response(record: NotificationPolicy) -> NotificationSettingsResponse:
    return NotificationSettingsResponse(
        user_id=record.user_id,
        enabled=bool(record.enabled),
        days_before=record.days_before,
        send_time=record.send_time,
        timezone=record.timezone,
        active_hours=ActiveHours(start=record.active_hours_start, end=record.active_hours_end),
        allow_weekends=bool(record.allow_weekends),
        updated_at=record.updated_at,
    )


@router.get("/{user_id}", response_model=NotificationSettingsResponse)
async def get_notification_settings(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get a user's notification settings, creating the defaults on first access."""
    record = await PolicyRepository(db).get_or_create(user_id)
    await retry_on_lock(db.commit)
    return _build_settings_response(record)


@router.put("/{user_id}", response_model=NotificationSettingsResponse)
async def update_notification_settings(
    user_id: str,
    update: NotificationSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Merge the given values into a user's notification settings."""
    fields = update.model_dump(exclude_unset=True, exclude={"active_hours"})
    if update.active_hours is not None:
        # Unsent bounds come through as None and are skipped by put()
        fields["active_hours_start"] = update.active_hours.start
        fields["active_hours_end"] = update.active_hours.end

    record = await PolicyRepository(db).put(user_id, **fields)
    await retry_on_lock(db.commit)
    return _build_settings_response(record)
