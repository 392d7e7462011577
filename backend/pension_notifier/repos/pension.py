"""Repository for pension contracts."""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pension import Pension, PENSION_STATUSES
from ..utils.time_utils import add_months

logger = logging.getLogger(__name__)

ZONES = ("stw", "nvbola")


def zone_of(lugar: Optional[str]) -> Optional[str]:
    """Map a free-text place to a known zone, or None."""
    location = (lugar or "").lower()
    for zone in ZONES:
        if zone in location:
            return zone
    return None


class PensionRepository:
    """CRUD and expiry queries for Pension rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, pension_id: int) -> Optional[Pension]:
        result = await self.db.execute(select(Pension).where(Pension.id == pension_id))
        return result.scalar_one_or_none()

    async def query_by_status_and_expiration(self, status: str, expiration_date: date) -> List[Pension]:
        """Pensions with the given status expiring exactly on ``expiration_date``."""
        result = await self.db.execute(
            select(Pension)
            .where(
                Pension.status == status,
                Pension.expiration_date == expiration_date,
            )
            .order_by(Pension.id)
        )
        return list(result.scalars().all())

    async def list(
        self,
        status: Optional[str] = None,
        lugar: Optional[str] = None,
        search: Optional[str] = None,
        expired_before: Optional[date] = None,
    ) -> List[Pension]:
        """Filtered listing. ``expired_before`` keeps pensions already past that date."""
        stmt = select(Pension)
        if expired_before:
            stmt = stmt.where(Pension.expiration_date < expired_before)
        if status:
            stmt = stmt.where(Pension.status == status)
        if lugar:
            stmt = stmt.where(Pension.lugar == lugar)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(
                Pension.person_name.ilike(pattern),
                Pension.company_name.ilike(pattern),
                Pension.local.ilike(pattern),
            ))
        result = await self.db.execute(stmt.order_by(Pension.expiration_date, Pension.id))
        return list(result.scalars().all())

    async def expiring_within(self, today: date, days: int) -> List[Pension]:
        """Active pensions expiring between ``today`` and ``today + days`` inclusive."""
        result = await self.db.execute(
            select(Pension)
            .where(
                Pension.status == "active",
                Pension.expiration_date >= today,
                Pension.expiration_date <= today + timedelta(days=days),
            )
            .order_by(Pension.expiration_date, Pension.id)
        )
        return list(result.scalars().all())

    async def stats(self) -> dict:
        """Active and inactive counts plus active monthly revenue, per zone and overall."""
        result = await self.db.execute(
            select(
                Pension.status,
                Pension.lugar,
                func.count(Pension.id),
                func.sum(Pension.monthly_amount),
            ).group_by(Pension.status, Pension.lugar)
        )

        counts = {status: {"stw": 0, "nvbola": 0, "total": 0} for status in PENSION_STATUSES}
        revenue = {"stw": Decimal("0"), "nvbola": Decimal("0"), "total": Decimal("0")}
        for status, lugar, count, amount in result.all():
            if status not in counts:
                continue
            zone = zone_of(lugar)
            counts[status]["total"] += count
            if zone:
                counts[status][zone] += count
            if status == "active":
                amount = Decimal(str(amount or 0))
                revenue["total"] += amount
                if zone:
                    revenue[zone] += amount

        return {
            "total_active": counts["active"],
            "total_inactive": counts["inactive"],
            "total_revenue": revenue,
        }

    async def create(self, **fields) -> Pension:
        # New pensions always start active
        fields["status"] = "active"
        pension = Pension(**fields)
        self.db.add(pension)
        await self.db.flush()
        await self.db.refresh(pension)
        logger.info(f"Pension created: {pension.display_name} (expires {pension.expiration_date})")
        return pension

    async def update(self, pension: Pension, **fields) -> Pension:
        for key, value in fields.items():
            setattr(pension, key, value)
        pension.updated_at = datetime.utcnow()
        await self.db.flush()
        return pension

    async def renew(
        self,
        pension: Pension,
        new_expiration: Optional[date] = None,
        months: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Pension:
        """Move the expiration date forward.

        Either an explicit date or a number of months counted from today.
        """
        if new_expiration is None:
            if not months:
                raise ValueError("Either a new expiration date or a number of months is required")
            new_expiration = add_months(today or date.today(), months)

        now = datetime.utcnow()
        pension.expiration_date = new_expiration
        pension.updated_at = now
        pension.last_renewal = now
        await self.db.flush()
        logger.info(f"Pension {pension.id} renewed until {new_expiration}")
        return pension

    async def toggle_status(self, pension: Pension) -> Pension:
        pension.status = "inactive" if pension.status == "active" else "active"
        pension.updated_at = datetime.utcnow()
        await self.db.flush()
        return pension

    async def delete(self, pension: Pension) -> None:
        await self.db.delete(pension)
        await self.db.flush()
