"""Device registration API endpoints for push notifications."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..repos.device import DeviceRepository
from ..repos.policy import PolicyRepository
from ..schemas.notifications import (
    DeviceRegisterRequest,
    DeviceRegisterResponse,
    DeviceUnregisterResponse,
)
from ..utils.db_utils import retry_on_lock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.post("/register", response_model=DeviceRegisterResponse)
async def register_device(
    request: DeviceRegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register the user's FCM token.

    A user has a single token; registering again replaces the previous one.
    The web client calls this every time notification permission is granted.
    """
    repo = DeviceRepository(db)
    existing = await repo.get(request.user_id)
    await repo.register(
        request.user_id,
        request.token,
        email=request.email,
        user_agent=request.user_agent,
        platform=request.platform,
        language=request.language,
    )
    await retry_on_lock(db.commit)

    return DeviceRegisterResponse(
        success=True,
        user_id=request.user_id,
        message="Device updated successfully" if existing else "Device registered successfully",
    )


@router.delete("/{user_id}", response_model=DeviceUnregisterResponse)
async def unregister_device(user_id: str, db: AsyncSession = Depends(get_db)):
    """Forget the user's token and turn their notifications off (logout)."""
    removed = await DeviceRepository(db).unregister(user_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Device not found")

    await PolicyRepository(db).put(user_id, enabled=False)
    await retry_on_lock(db.commit)

    logger.info(f"Device unregistered for user {user_id}")
    return DeviceUnregisterResponse(
        success=True,
        message="Device unregistered successfully",
    )


@router.get("/count")
async def get_device_count(db: AsyncSession = Depends(get_db)):
    """Get count of registered devices (for admin dashboard)."""
    return await DeviceRepository(db).count()
