from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order, OrderItem, OrderTracking

class OrderRepository:
    @staticmethod
    async def create_order(
        db: AsyncSession,
        order: Order,
        items: List[OrderItem],
        tracking: OrderTracking,
    ) -> Order:
        """Order, its item snapshots and the first tracking row commit together."""
        order.items = items
        order.tracking = [tracking]
        db.add(order)
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_user_orders(db: AsyncSession, user_id: int) -> List[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_orders(db: AsyncSession, status: Optional[str] = None) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        if status:
            stmt = stmt.where(Order.status == status)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update_order(
        db: AsyncSession,
        order: Order,
        tracking: Optional[OrderTracking] = None,
        **fields,
    ) -> Order:
        """Apply field changes and an optional tracking row in one commit."""
        for name, value in fields.items():
            setattr(order, name, value)
        if tracking is not None:
            tracking.order_id = order.id
            db.add(tracking)
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def list_tracking(db: AsyncSession, order_id: int) -> List[OrderTracking]:
        result = await db.execute(
            select(OrderTracking)
            .where(OrderTracking.order_id == order_id)
            .order_by(OrderTracking.id)
        )
        return list(result.scalars().all())
