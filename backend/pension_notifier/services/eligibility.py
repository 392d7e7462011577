"""Eligibility filter - selects users recently active in the client."""
import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import UserActivity
from ..repos.activity import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_WINDOW_HOURS = 48


async def select_active_users(
    session: AsyncSession,
    now: datetime,
    window_hours: int = DEFAULT_ACTIVITY_WINDOW_HOURS,
) -> List[UserActivity]:
    """Users whose last activity falls in ``[now - window_hours, now]``.

    A store failure is logged and yields no users, so the run does nothing.
    """
    cutoff = now - timedelta(hours=window_hours)
    try:
        return await ActivityRepository(session).query_active_since(cutoff)
    except Exception as e:
        logger.error(f"Error fetching active users: {e}")
        return []
