"""Repository for the append-only notification log."""
from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.notification_log import NotificationLog


class NotificationLogRepository:
    """Appends and lists NotificationLog rows. Rows are never updated."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, **fields) -> NotificationLog:
        entry = NotificationLog(**fields)
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_recent(self, limit: int = 50, user_id: Optional[str] = None) -> List[NotificationLog]:
        stmt = select(NotificationLog)
        if user_id:
            stmt = stmt.where(NotificationLog.user_id == user_id)
        result = await self.db.execute(
            stmt.order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc()).limit(limit)
        )
        return list(result.scalars().all())
