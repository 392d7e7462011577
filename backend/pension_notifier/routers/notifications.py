"""Notification log and manual run endpoints."""
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..repos.notification_log import NotificationLogRepository
from ..schemas.notifications import NotificationLogResponse, RunSummaryResponse
from ..services.scheduler import scheduler_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/logs", response_model=List[NotificationLogResponse])
async def list_notification_logs(
    limit: int = Query(default=50, ge=1, le=500),
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Most recent notification deliveries, newest first."""
    return await NotificationLogRepository(db).list_recent(limit=limit, user_id=user_id)


@router.post("/run", response_model=RunSummaryResponse)
async def run_expiry_check():
    """Run the expiring pension check now.

    There is no duplicate protection: users already notified today are notified again.
    """
    logger.info("Manual expiring pension check requested")
    summary = await scheduler_service.run_once()
    return RunSummaryResponse(**summary.to_dict())
