import secrets
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.notification_service.service import NotificationService
from shared.errors import NotFoundError
from shared.observability.metrics import storefront_order_status_updates_total

from .models import Order, OrderTracking
from .repository import OrderRepository
from .status import OrderStatus, ensure_transition

logger = structlog.get_logger(__name__)


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Human-readable order number, e.g. PF-20260118-3FA9C1."""
    now = now or datetime.now(timezone.utc)
    return f"PF-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def status_tracking_entry(status: str) -> OrderTracking:
    return OrderTracking(
        status=status.title(),
        message=f"Order status updated to {status}.",
    )


class OrderService:
    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def get_order_for_user(
        db: AsyncSession, order_id: int, user_id: int, is_admin: bool = False
    ) -> Order:
        order = await OrderService.get_order(db, order_id)
        # Other shoppers' orders look exactly like missing ones
        if order.user_id != user_id and not is_admin:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def list_user_orders(db: AsyncSession, user_id: int) -> List[Order]:
        return await OrderRepository.list_user_orders(db, user_id)

    @staticmethod
    async def list_orders(db: AsyncSession, status: Optional[OrderStatus] = None) -> List[Order]:
        return await OrderRepository.list_orders(db, status.value if status else None)

    @staticmethod
    async def update_order_status(
        db: AsyncSession, order_id: int, new_status: OrderStatus
    ) -> Order:
        """Operator status change: update row, append tracking, notify the owner."""
        order = await OrderService.get_order(db, order_id)
        status = ensure_transition(order.status, new_status)

        order = await OrderRepository.update_order(
            db, order, tracking=status_tracking_entry(status.value), status=status.value
        )
        storefront_order_status_updates_total.labels(status=status.value).inc()
        logger.info("order_status_updated", order_id=order_id, status=status.value)

        result = await NotificationService.send_order_status_update(db, order, status.value)
        if not result.success:
            order = await OrderRepository.get_order(db, order_id)
        return order
