"""Order notifications.

There is no mail transport. "Sending" an email means logging the rendered
subject and writing a notification row that the storefront UI reads back.
Every send is best-effort: failures are logged and counted, never raised,
so a broken notifications table can't fail a checkout.
"""
from typing import Any, Awaitable, Callable, List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import ADMIN_EMAIL
from shared.errors import NotFoundError
from shared.observability.metrics import storefront_notification_failures_total

from .models import AdminNotification, Notification
from .repository import NotificationRepository
from .schemas import DeliveryResult, EmailTemplate

logger = structlog.get_logger(__name__)

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared.",
    "processing": "Your order is being processed and will ship soon.",
    "shipped": "Your order has been shipped and is on its way!",
    "delivered": "Your order has been delivered successfully!",
    "cancelled": "Your order has been cancelled.",
    "refunded": "Your order has been refunded.",
}


def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f"Your order status has been updated to {status}.")


def payment_method_label(method: str) -> str:
    if method == "cod":
        return "Cash on Delivery"
    return method.replace("_", " ").upper()


def order_snapshot(order) -> dict[str, Any]:
    """JSON-safe copy of the order, stored alongside the notification."""
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "subtotal": order.subtotal,
        "tax_amount": order.tax_amount,
        "shipping_amount": order.shipping_amount,
        "cod_charge": order.cod_charge,
        "discount_amount": order.discount_amount,
        "total_amount": order.total_amount,
        "currency": order.currency,
        "customer_email": order.customer_email,
        "shipping_address": dict(order.shipping_address or {}),
        "notes": order.notes,
        "items": [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "flavor": item.flavor,
                "size": item.size,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in order.items
        ],
    }


def render_order_confirmation(order) -> EmailTemplate:
    address = order.shipping_address or {}
    is_cod = order.payment_method == "cod"
    lines = [
        f"Hi {address.get('full_name', '')},",
        "",
        f"Your order #{order.order_number} has been confirmed!",
        "",
        f"Payment Method: {payment_method_label(order.payment_method)}",
    ]
    for item in order.items:
        lines.append(
            f"  {item.quantity} x {item.product_name} ({item.flavor}, {item.size})"
            f"  ₹{item.total_price:.2f}"
        )
    lines.append(f"Total Amount: ₹{order.total_amount:.2f}")
    if is_cod:
        lines.append(
            f"Keep ₹{order.total_amount:.2f} ready (including ₹{order.cod_charge:.0f} COD charges). "
            "Our team will call you within 24 hours to confirm."
        )
    else:
        lines.append("We'll notify you when your order ships.")

    return EmailTemplate(
        subject=f"Order Confirmation #{order.order_number} - PowerFuel",
        text="\n".join(lines),
    )


def render_admin_order_notification(order) -> EmailTemplate:
    address = order.shipping_address or {}
    is_cod = order.payment_method == "cod"
    kind = "URGENT COD ORDER" if is_cod else "NEW ORDER"
    text = "\n".join([
        f"Order: #{order.order_number}",
        f"Total: ₹{order.total_amount:.2f}",
        f"Payment: {payment_method_label(order.payment_method)}",
        f"Name: {address.get('full_name', '')}",
        f"Phone: {address.get('phone', '')}",
        f"Email: {order.customer_email or 'N/A'}",
        f"{address.get('address_line_1', '')}, {address.get('city', '')}, "
        f"{address.get('state', '')} {address.get('postal_code', '')}",
        "COD ORDER - CALL CUSTOMER WITHIN 24 HOURS TO CONFIRM!" if is_cod else "",
    ])
    return EmailTemplate(
        subject=f"{kind} #{order.order_number} - ₹{order.total_amount:.2f} - PowerFuel",
        text=text,
    )


class NotificationService:

    @staticmethod
    async def _best_effort(
        db: AsyncSession, kind: str, order, send: Callable[[], Awaitable[Any]]
    ) -> DeliveryResult:
        order_id = order.id
        try:
            await send()
            return DeliveryResult(success=True)
        except Exception as e:
            storefront_notification_failures_total.labels(kind=kind).inc()
            logger.exception("notification_failed", kind=kind, order_id=order_id)
            # Expires every loaded row; callers re-read the order afterwards
            await db.rollback()
            return DeliveryResult(success=False, error=str(e))

    @staticmethod
    async def send_order_confirmation(db: AsyncSession, order) -> DeliveryResult:
        async def send():
            template = render_order_confirmation(order)
            logger.info(
                "email_order_confirmation",
                to=order.customer_email,
                subject=template.subject,
            )
            await NotificationRepository.create(db, Notification(
                user_id=order.user_id,
                type="order_confirmed",
                title="Order Confirmed",
                message=f"Your order #{order.order_number} has been confirmed.",
                data=order_snapshot(order),
            ))

        return await NotificationService._best_effort(db, "order_confirmation", order, send)

    @staticmethod
    async def send_admin_order_notification(db: AsyncSession, order) -> DeliveryResult:
        async def send():
            template = render_admin_order_notification(order)
            is_cod = order.payment_method == "cod"
            logger.info(
                "email_admin_order_alert",
                to=ADMIN_EMAIL,
                subject=template.subject,
                order_number=order.order_number,
                total_amount=order.total_amount,
                is_cod=is_cod,
            )
            snapshot = order_snapshot(order)
            snapshot.update({"is_cod": is_cod, "admin_email": ADMIN_EMAIL})
            await NotificationRepository.create_admin(db, AdminNotification(
                type="new_order",
                title=f"New {'COD ' if is_cod else ''}Order",
                message=(
                    f"Order #{order.order_number} received from "
                    f"{(order.shipping_address or {}).get('full_name', 'a customer')}"
                ),
                data=snapshot,
            ))

        return await NotificationService._best_effort(db, "admin_alert", order, send)

    @staticmethod
    async def send_order_status_update(db: AsyncSession, order, new_status: str) -> DeliveryResult:
        async def send():
            message = status_message(new_status)
            logger.info(
                "email_order_status_update",
                order_id=order.id,
                status=new_status,
                to=order.customer_email,
            )
            await NotificationRepository.create(db, Notification(
                user_id=order.user_id,
                type=f"order_{new_status}",
                title=f"Order {new_status.capitalize()}",
                message=f"Order #{order.order_number}: {message}",
                data={"order_id": order.id, "order_number": order.order_number, "status": new_status},
            ))

        return await NotificationService._best_effort(db, "status_update", order, send)

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int) -> List[Notification]:
        return await NotificationRepository.list_for_user(db, user_id)

    @staticmethod
    async def list_admin(db: AsyncSession) -> List[AdminNotification]:
        return await NotificationRepository.list_admin(db)

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
        notification = await NotificationRepository.get(db, notification_id)
        if not notification or notification.user_id != user_id:
            raise NotFoundError("Notification", notification_id)
        return await NotificationRepository.mark_read(db, notification)
