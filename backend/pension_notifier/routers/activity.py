"""User activity heartbeat endpoints."""
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..repos.activity import ActivityRepository
from ..schemas.notifications import ActivityHeartbeat, ActivityStatus
from ..utils.db_utils import retry_on_lock

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.post("/{user_id}", response_model=ActivityStatus)
async def record_activity(
    user_id: str,
    heartbeat: ActivityHeartbeat,
    user_agent: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Record that the user just used the app."""
    record = await ActivityRepository(db).touch(
        user_id,
        email=heartbeat.email,
        user_agent=heartbeat.user_agent or user_agent,
    )
    await retry_on_lock(db.commit)
    return ActivityStatus(user_id=user_id, active=True, last_active_at=record.last_active_at)


@router.get("/{user_id}", response_model=ActivityStatus)
async def get_activity(user_id: str, db: AsyncSession = Depends(get_db)):
    """Whether the user counts as active for expiry notifications."""
    record = await ActivityRepository(db).get(user_id)
    if record is None:
        return ActivityStatus(user_id=user_id, active=False)

    cutoff = datetime.utcnow() - timedelta(hours=settings.activity_window_hours)
    return ActivityStatus(
        user_id=user_id,
        active=record.last_active_at >= cutoff,
        last_active_at=record.last_active_at,
    )
