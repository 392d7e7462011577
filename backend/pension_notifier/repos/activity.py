"""Repository for user activity heartbeats."""
from datetime import datetime
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import UserActivity
from ..utils.time_utils import to_utc_naive


class ActivityRepository:
    """Reads and writes UserActivity rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[UserActivity]:
        result = await self.db.execute(
            select(UserActivity).where(UserActivity.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def query_active_since(self, since: datetime) -> List[UserActivity]:
        """Users whose last activity is at or after ``since``."""
        result = await self.db.execute(
            select(UserActivity)
            .where(UserActivity.last_active_at >= to_utc_naive(since))
            .order_by(UserActivity.user_id)
        )
        return list(result.scalars().all())

    async def touch(
        self,
        user_id: str,
        email: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> UserActivity:
        """Record that the user interacted with the client just now."""
        seen_at = to_utc_naive(now) if now else datetime.utcnow()
        record = await self.get(user_id)
        if record is None:
            record = UserActivity(user_id=user_id)
            self.db.add(record)

        record.last_active_at = seen_at
        record.online = True
        if email is not None:
            record.email = email
        if user_agent is not None:
            record.user_agent = user_agent

        await self.db.flush()
        return record
