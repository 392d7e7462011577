"""Repository for push device tokens."""
import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.device_token import DeviceToken

logger = logging.getLogger(__name__)


class DeviceRepository:
    """One registered FCM token per user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[DeviceToken]:
        result = await self.db.execute(
            select(DeviceToken).where(DeviceToken.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_tokens(self, user_id: str) -> List[str]:
        """All push addresses for the user (zero or one today)."""
        record = await self.get(user_id)
        if record and record.token:
            return [record.token]
        return []

    async def register(
        self,
        user_id: str,
        token: str,
        email: Optional[str] = None,
        user_agent: Optional[str] = None,
        platform: Optional[str] = None,
        language: Optional[str] = None,
    ) -> DeviceToken:
        """Store the user's token, replacing any previous one."""
        record = await self.get(user_id)
        if record is None:
            record = DeviceToken(user_id=user_id)
            self.db.add(record)
            logger.info(f"New device registered for user {user_id}: {token[:16]}...")
        else:
            logger.info(f"Device token updated for user {user_id}: {token[:16]}...")

        record.token = token
        record.email = email if email is not None else record.email
        record.user_agent = user_agent
        record.platform = platform
        record.language = language
        record.updated_at = datetime.utcnow()

        await self.db.flush()
        return record

    async def unregister(self, user_id: str) -> bool:
        """Clear the user's token. Returns False if the user never registered."""
        record = await self.get(user_id)
        if record is None:
            return False
        record.token = None
        record.updated_at = datetime.utcnow()
        await self.db.flush()
        return True

    async def count(self) -> dict:
        total_result = await self.db.execute(select(func.count(DeviceToken.user_id)))
        total = total_result.scalar() or 0

        enabled_result = await self.db.execute(
            select(func.count(DeviceToken.user_id)).where(DeviceToken.token.is_not(None))
        )
        enabled = enabled_result.scalar() or 0

        return {"total": total, "enabled": enabled}
