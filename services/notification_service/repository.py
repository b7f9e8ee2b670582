from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AdminNotification, Notification


class NotificationRepository:
    @staticmethod
    async def create(db: AsyncSession, notification: Notification) -> Notification:
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        return notification

    @staticmethod
    async def create_admin(db: AsyncSession, notification: AdminNotification) -> AdminNotification:
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        return notification

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int) -> List[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_admin(db: AsyncSession) -> List[AdminNotification]:
        result = await db.execute(
            select(AdminNotification).order_by(AdminNotification.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get(db: AsyncSession, notification_id: int) -> Optional[Notification]:
        result = await db.execute(select(Notification).where(Notification.id == notification_id))
        return result.scalars().first()

    @staticmethod
    async def mark_read(db: AsyncSession, notification: Notification) -> Notification:
        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
        return notification
