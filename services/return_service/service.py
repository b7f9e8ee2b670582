import secrets
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.service import OrderService
from services.order_service.status import OrderStatus
from shared.errors import NotFoundError, ValidationError

from .models import ReturnItem, ReturnRequest
from .repository import ReturnRepository
from .schemas import ReturnCreate
from .status import ReturnStatus, ensure_return_transition

logger = structlog.get_logger(__name__)

RETURN_WINDOW_DAYS = 30


def generate_return_number(now: Optional[datetime] = None) -> str:
    """e.g. RT-20260118-7C02AE"""
    now = now or datetime.now(timezone.utc)
    return f"RT-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class ReturnService:
    @staticmethod
    async def create_return(
        db: AsyncSession, user_id: int, data: ReturnCreate, now: Optional[datetime] = None
    ) -> ReturnRequest:
        now = now or datetime.now(timezone.utc)
        order = await OrderService.get_order_for_user(db, data.order_id, user_id)

        if order.status != OrderStatus.DELIVERED.value:
            raise ValidationError("Only delivered orders can be returned", field="order_id")
        if _aware(order.created_at) < now - timedelta(days=RETURN_WINDOW_DAYS):
            raise ValidationError(
                f"Returns are accepted within {RETURN_WINDOW_DAYS} days of ordering", field="order_id"
            )
        if await ReturnRepository.get_open_for_order(db, order.id):
            raise ValidationError("A return is already open for this order", field="order_id")

        ordered = {item.id: item for item in order.items}
        requested = Counter()
        for line in data.items:
            if line.order_item_id not in ordered:
                raise ValidationError(
                    f"Item {line.order_item_id} is not part of this order", field="items"
                )
            requested[line.order_item_id] += line.quantity

        for item_id, quantity in requested.items():
            if quantity > ordered[item_id].quantity:
                raise ValidationError(
                    f"Cannot return {quantity} of '{ordered[item_id].product_name}'; "
                    f"{ordered[item_id].quantity} were ordered",
                    field="items",
                )

        items = [
            ReturnItem(
                order_item_id=line.order_item_id,
                product_name=ordered[line.order_item_id].product_name,
                quantity=line.quantity,
                unit_price=ordered[line.order_item_id].unit_price,
                reason=line.reason,
            )
            for line in data.items
        ]
        request = ReturnRequest(
            return_number=generate_return_number(now),
            order_id=order.id,
            user_id=user_id,
            reason=data.reason.value,
            description=data.description,
            status=ReturnStatus.REQUESTED.value,
            refund_amount=round(sum(item.unit_price * item.quantity for item in items), 2),
        )
        request = await ReturnRepository.create(db, request, items)
        logger.info(
            "return_requested",
            return_number=request.return_number,
            order_id=order.id,
            refund_amount=request.refund_amount,
        )
        return request

    @staticmethod
    async def get_return(db: AsyncSession, return_id: int) -> ReturnRequest:
        request = await ReturnRepository.get(db, return_id)
        if not request:
            raise NotFoundError("Return", return_id)
        return request

    @staticmethod
    async def get_return_for_user(
        db: AsyncSession, return_id: int, user_id: int, is_admin: bool = False
    ) -> ReturnRequest:
        request = await ReturnService.get_return(db, return_id)
        if request.user_id != user_id and not is_admin:
            raise NotFoundError("Return", return_id)
        return request

    @staticmethod
    async def list_user_returns(db: AsyncSession, user_id: int) -> List[ReturnRequest]:
        return await ReturnRepository.list_for_user(db, user_id)

    @staticmethod
    async def list_returns(
        db: AsyncSession, status: Optional[ReturnStatus] = None
    ) -> List[ReturnRequest]:
        return await ReturnRepository.list_all(db, status.value if status else None)

    @staticmethod
    async def update_status(
        db: AsyncSession,
        return_id: int,
        new_status: ReturnStatus,
        admin_notes: Optional[str] = None,
    ) -> ReturnRequest:
        request = await ReturnService.get_return(db, return_id)
        status = ensure_return_transition(request.status, new_status)

        fields = {"status": status.value}
        if admin_notes is not None:
            fields["admin_notes"] = admin_notes
        request = await ReturnRepository.update(db, request, **fields)
        logger.info("return_status_updated", return_id=return_id, status=status.value)
        return request
