"""Pension API endpoints."""
import logging
from typing import Optional, List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.pension import Pension
from ..repos.pension import PensionRepository
from ..schemas.pension import PensionCreate, PensionUpdate, PensionRenew, PensionResponse, PensionStats
from ..utils.db_utils import retry_on_lock
from ..utils.time_utils import local_today

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pensions", tags=["pensions"])


async def _get_pension_or_404(repo: PensionRepository, pension_id: int) -> Pension:
    pension = await repo.get(pension_id)
    if not pension:
        raise HTTPException(status_code=404, detail="Pension not found")
    return pension


@router.get("", response_model=List[PensionResponse])
async def list_pensions(
    status: Optional[Literal["active", "inactive"]] = None,
    lugar: Optional[str] = None,
    search: Optional[str] = None,
    expired: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """List pensions, optionally filtered by status, place, search term or already expired."""
    expired_before = local_today(settings.schedule_timezone) if expired else None
    return await PensionRepository(db).list(
        status=status, lugar=lugar, search=search, expired_before=expired_before
    )


@router.get("/expiring", response_model=List[PensionResponse])
async def list_expiring_pensions(
    days: int = Query(default=30, ge=0, le=365),
    db: AsyncSession = Depends(get_db),
):
    """Active pensions expiring in the next ``days`` days (dashboard)."""
    return await PensionRepository(db).expiring_within(local_today(settings.schedule_timezone), days)


@router.get("/stats", response_model=PensionStats)
async def pension_stats(db: AsyncSession = Depends(get_db)):
    """Dashboard counts and monthly revenue by zone."""
    return await PensionRepository(db).stats()


@router.post("", response_model=PensionResponse, status_code=201)
async def create_pension(
    pension: PensionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new pension."""
    repo = PensionRepository(db)
    created = await repo.create(**pension.model_dump())
    await retry_on_lock(db.commit)
    return created


@router.get("/{pension_id}", response_model=PensionResponse)
async def get_pension(pension_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single pension."""
    return await _get_pension_or_404(PensionRepository(db), pension_id)


@router.put("/{pension_id}", response_model=PensionResponse)
async def update_pension(
    pension_id: int,
    update: PensionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update the given fields of a pension."""
    repo = PensionRepository(db)
    pension = await _get_pension_or_404(repo, pension_id)
    await repo.update(pension, **update.model_dump(exclude_unset=True))
    await retry_on_lock(db.commit)
    return pension


@router.post("/{pension_id}/renew", response_model=PensionResponse)
async def renew_pension(
    pension_id: int,
    renewal: PensionRenew,
    db: AsyncSession = Depends(get_db),
):
    """Move a pension's expiration date forward."""
    repo = PensionRepository(db)
    pension = await _get_pension_or_404(repo, pension_id)
    await repo.renew(
        pension,
        new_expiration=renewal.expiration_date,
        months=renewal.months,
        today=local_today(settings.schedule_timezone),
    )
    await retry_on_lock(db.commit)
    return pension


@router.post("/{pension_id}/toggle-status", response_model=PensionResponse)
async def toggle_pension_status(pension_id: int, db: AsyncSession = Depends(get_db)):
    """Switch a pension between active and inactive."""
    repo = PensionRepository(db)
    pension = await _get_pension_or_404(repo, pension_id)
    await repo.toggle_status(pension)
    await retry_on_lock(db.commit)
    logger.info(f"Pension {pension_id} is now {pension.status}")
    return pension


@router.delete("/{pension_id}", status_code=204)
async def delete_pension(pension_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a pension."""
    repo = PensionRepository(db)
    pension = await _get_pension_or_404(repo, pension_id)
    await repo.delete(pension)
    await retry_on_lock(db.commit)
