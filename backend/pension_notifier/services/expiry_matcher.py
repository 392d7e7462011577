"""Expiry matcher - finds active pensions expiring on the lead-time date."""
from datetime import date, timedelta
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pension import Pension
from ..repos.pension import PensionRepository


def target_date(today: date, days_before: int) -> date:
    """The calendar day a pension must expire on to be notified today."""
    return today + timedelta(days=days_before)


async def find_expiring(session: AsyncSession, today: date, days_before: int) -> List[Pension]:
    """Active pensions whose expiration date is exactly ``today + days_before``."""
    return await PensionRepository(session).query_by_status_and_expiration(
        "active", target_date(today, days_before)
    )
