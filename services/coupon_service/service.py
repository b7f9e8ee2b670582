from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import CouponError

from .models import Coupon, CouponUsage
from .repository import CouponRepository
from .schemas import CouponCreate, CouponType

logger = structlog.get_logger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything here is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_discount(coupon: Coupon, subtotal: float, shipping_amount: float) -> float:
    """Discount for this order; never more than what the coupon applies to."""
    ceiling = subtotal
    if coupon.type == CouponType.PERCENTAGE.value:
        discount = subtotal * coupon.value / 100
        if coupon.maximum_discount_amount is not None:
            discount = min(discount, coupon.maximum_discount_amount)
    elif coupon.type == CouponType.FIXED_AMOUNT.value:
        discount = coupon.value
    elif coupon.type == CouponType.FREE_SHIPPING.value:
        discount = shipping_amount
        ceiling = subtotal + shipping_amount
    else:
        discount = 0.0
    return round(max(0.0, min(discount, ceiling)), 2)


class CouponService:
    @staticmethod
    async def create_coupon(db: AsyncSession, data: CouponCreate) -> Coupon:
        fields = data.model_dump(exclude_none=True)
        fields["code"] = normalize_code(data.code)
        fields["type"] = data.type.value
        return await CouponRepository.create(db, Coupon(**fields))

    @staticmethod
    async def list_active(db: AsyncSession) -> List[Coupon]:
        return await CouponRepository.list_active(db)

    @staticmethod
    async def validate(
        db: AsyncSession,
        code: str,
        user_id: int,
        subtotal: float,
        now: Optional[datetime] = None,
    ) -> Coupon:
        """Return the coupon if it applies to this user and subtotal, else raise CouponError."""
        code = normalize_code(code)
        now = now or datetime.now(timezone.utc)

        coupon = await CouponRepository.get_by_code(db, code)
        if not coupon or not coupon.is_active:
            raise CouponError(code, "not found or inactive")
        if _aware(coupon.valid_from) > now:
            raise CouponError(code, "not valid yet")
        if coupon.valid_until is not None and _aware(coupon.valid_until) < now:
            raise CouponError(code, "expired")
        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            raise CouponError(code, "usage limit reached")
        if await CouponRepository.has_user_used(db, coupon.id, user_id):
            raise CouponError(code, "already used")
        if subtotal < coupon.minimum_order_amount:
            raise CouponError(code, f"minimum order amount is ₹{coupon.minimum_order_amount:.0f}")
        return coupon

    @staticmethod
    async def record_usage(
        db: AsyncSession, coupon: Coupon, user_id: int, order_id: int, discount_amount: float
    ) -> None:
        await CouponRepository.record_usage(db, coupon, CouponUsage(
            coupon_id=coupon.id,
            user_id=user_id,
            order_id=order_id,
            discount_amount=discount_amount,
        ))
        logger.info("coupon_redeemed", code=coupon.code, user_id=user_id, order_id=order_id)

    @staticmethod
    async def release_usage(db: AsyncSession, coupon_id: int, user_id: int) -> None:
        await CouponRepository.release_usage(db, coupon_id, user_id)
        logger.info("coupon_released", coupon_id=coupon_id, user_id=user_id)
