from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Coupon, CouponUsage


class CouponRepository:
    @staticmethod
    async def create(db: AsyncSession, coupon: Coupon) -> Coupon:
        db.add(coupon)
        await db.commit()
        await db.refresh(coupon)
        return coupon

    @staticmethod
    async def get_by_code(db: AsyncSession, code: str) -> Optional[Coupon]:
        result = await db.execute(select(Coupon).where(Coupon.code == code))
        return result.scalars().first()

    @staticmethod
    async def list_active(db: AsyncSession) -> List[Coupon]:
        result = await db.execute(
            select(Coupon).where(Coupon.is_active.is_(True)).order_by(Coupon.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def has_user_used(db: AsyncSession, coupon_id: int, user_id: int) -> bool:
        result = await db.execute(
            select(CouponUsage.id)
            .where(CouponUsage.coupon_id == coupon_id)
            .where(CouponUsage.user_id == user_id)
        )
        return result.first() is not None

    @staticmethod
    async def record_usage(db: AsyncSession, coupon: Coupon, usage: CouponUsage) -> None:
        coupon.used_count = (coupon.used_count or 0) + 1
        db.add(usage)
        await db.commit()

    @staticmethod
    async def release_usage(db: AsyncSession, coupon_id: int, user_id: int) -> None:
        """Undo record_usage for an order that didn't go through."""
        result = await db.execute(
            select(CouponUsage)
            .where(CouponUsage.coupon_id == coupon_id)
            .where(CouponUsage.user_id == user_id)
        )
        usage = result.scalars().first()
        if usage is None:
            return
        coupon = await db.get(Coupon, coupon_id)
        if coupon is not None and coupon.used_count:
            coupon.used_count -= 1
        await db.delete(usage)
        await db.commit()
