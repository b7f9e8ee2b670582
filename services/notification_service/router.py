from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError
from shared.security.dependencies import get_current_admin, get_current_user

from .schemas import AdminNotificationResponse, NotificationResponse
from .service import NotificationService

router = APIRouter()
public_router = APIRouter()

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "notification", "status": "running"}


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    user_id: int = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    return await NotificationService.list_for_user(db, user_id)


@router.get("/admin", response_model=List[AdminNotificationResponse])
async def list_admin_notifications(
    _: int = Depends(get_current_admin), db: AsyncSession = Depends(get_db)
):
    return await NotificationService.list_admin(db)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await NotificationService.mark_read(db, notification_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
