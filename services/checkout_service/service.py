"""Checkout: turn a session's cart into a persisted, confirmed order.

Validation happens before anything is written. The writes then run as a
saga (see checkout_saga.py) so a failure part-way through leaves a
cancelled order and a refunded payment rather than half an order.
Notifications are sent afterwards and never fail the checkout. The cart is
cleared only when the order went through.
"""
import re
import time
from typing import Any, List, Optional

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from services.address_service.service import AddressService
from services.auth_service.repository import UserRepository
from services.cart_service.repository import DatabaseStorage
from services.cart_service.schemas import CartItem
from services.cart_service.service import CartStore, cart_total, session_cart_key
from services.coupon_service.service import CouponService, calculate_discount
from services.notification_service.service import NotificationService
from services.order_service.models import Order
from services.order_service.pricing import COD_MINIMUM, calculate_totals
from services.order_service.repository import OrderRepository
from services.order_service.schemas import Address
from services.order_service.status import PaymentMethod
from services.payment_service.gateways import PaymentGateway
from shared.errors import (
    CheckoutValidationError,
    NotFoundError,
    PaymentDeclinedError,
    PersistenceError,
    ValidationError,
)
from shared.observability import (
    storefront_checkout_duration_seconds,
    storefront_checkout_total,
)

from .checkout_saga import build_checkout_saga
from .schemas import CheckoutRequest

logger = structlog.get_logger(__name__)

POSTAL_CODE_RE = re.compile(r"^\d{6}$")

_REQUIRED_ADDRESS_FIELDS = [
    ("full_name", "Please enter your full name"),
    ("phone", "Please enter your phone number"),
    ("address_line_1", "Please enter your address"),
    ("city", "Please select or enter your city"),
    ("state", "Please select your state"),
    ("postal_code", "Please enter your postal code"),
]


class CheckoutResult(BaseModel):
    success: bool
    order: Optional[Any] = None
    error: Optional[str] = None


def validate_address(address: Address) -> None:
    for field, message in _REQUIRED_ADDRESS_FIELDS:
        value = (getattr(address, field) or "").strip()
        # "other" is the city picker's placeholder, not a city
        if not value or (field == "city" and value == "other"):
            raise CheckoutValidationError(message, field=f"shipping_address.{field}")
    if not POSTAL_CODE_RE.match(address.postal_code.strip()):
        raise CheckoutValidationError(
            "Please enter a valid 6-digit PIN code", field="shipping_address.postal_code"
        )


def validate_checkout(request: CheckoutRequest, items: List[CartItem]) -> float:
    """Pre-order checks. Returns the cart subtotal."""
    if not items:
        raise CheckoutValidationError("Your cart is empty", field="cart")

    if request.shipping_address is None:
        raise CheckoutValidationError("Please add a shipping address", field="shipping_address")
    validate_address(request.shipping_address)

    if not request.payment_method:
        raise CheckoutValidationError("Please select a payment method", field="payment_method")
    if request.payment_method not in {m.value for m in PaymentMethod}:
        raise CheckoutValidationError("Unsupported payment method", field="payment_method")

    subtotal = cart_total(items)
    if request.payment_method == PaymentMethod.COD.value and subtotal < COD_MINIMUM:
        raise CheckoutValidationError(
            f"Minimum order amount for COD is ₹{COD_MINIMUM:.0f}", field="payment_method"
        )
    return subtotal


class CheckoutService:

    @staticmethod
    async def resolve_address(
        db: AsyncSession, request: CheckoutRequest, user_id: int
    ) -> CheckoutRequest:
        """Swap a saved address id for a snapshot of that address."""
        if request.shipping_address_id is None:
            return request
        try:
            address = await AddressService.snapshot_for_order(db, request.shipping_address_id, user_id)
        except NotFoundError:
            raise CheckoutValidationError("Saved address not found", field="shipping_address_id")
        return request.model_copy(
            update={"shipping_address": address.model_copy(update={"type": "shipping"})}
        )

    @staticmethod
    async def price_order(
        db: AsyncSession, request: CheckoutRequest, user_id: int, subtotal: float
    ):
        coupon = None
        discount = 0.0
        if request.coupon_code:
            coupon = await CouponService.validate(db, request.coupon_code, user_id, subtotal)
            base = calculate_totals(subtotal, request.payment_method)
            discount = calculate_discount(coupon, subtotal, base.shipping_amount)
        return calculate_totals(subtotal, request.payment_method, discount), coupon

    @staticmethod
    async def checkout(
        db: AsyncSession,
        gateway: PaymentGateway,
        user_id: int,
        request: CheckoutRequest,
    ) -> CheckoutResult:
        started = time.perf_counter()
        log = logger.bind(user_id=user_id, session_id=request.session_id)

        cart = CartStore(
            DatabaseStorage(db), key=session_cart_key(request.session_id), user_id=user_id
        )
        try:
            await cart.ensure_access()
        except NotFoundError:
            storefront_checkout_total.labels(status="rejected").inc()
            log.warning("checkout_cart_not_owned")
            raise
        items = await cart.get_items()

        try:
            request = await CheckoutService.resolve_address(db, request, user_id)
            subtotal = validate_checkout(request, items)
            totals, coupon = await CheckoutService.price_order(db, request, user_id, subtotal)
        except ValidationError as e:
            storefront_checkout_total.labels(status="rejected").inc()
            log.info("checkout_rejected", reason=str(e), field=e.field)
            raise

        user = await UserRepository.get_by_id(db, user_id)
        ctx = {
            "db": db,
            "gateway": gateway,
            "user_id": user_id,
            "customer_email": user.email if user else None,
            "request": request,
            "cart_items": items,
            "totals": totals,
            "coupon": coupon,
        }

        try:
            with storefront_checkout_duration_seconds.time():
                await build_checkout_saga().execute(ctx)
        except PaymentDeclinedError as e:
            storefront_checkout_total.labels(status="payment_failed").inc()
            log.warning("checkout_payment_failed", order_id=ctx.get("order_id"), error=str(e))
            order = await OrderRepository.get_order(db, ctx["order_id"])
            return CheckoutResult(success=False, order=order, error=str(e))
        except Exception as e:
            storefront_checkout_total.labels(status="error").inc()
            log.exception(
                "checkout_failed",
                step=ctx.get("failed_step"),
                order_id=ctx.get("order_id"),
                compensated=ctx.get("compensated"),
                compensation_failures=ctx.get("compensation_failures"),
            )
            await db.rollback()
            raise PersistenceError(ctx.get("failed_step") or "checkout", e) from e

        order = await CheckoutService._notify(db, ctx["order_id"], request.payment_method)

        # Only a placed order empties the cart; every failure above leaves it for a retry
        await cart.clear()

        storefront_checkout_total.labels(status="success").inc()
        log.info(
            "checkout_completed",
            order_id=order.id,
            order_number=order.order_number,
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return CheckoutResult(success=True, order=order)

    @staticmethod
    async def _notify(db: AsyncSession, order_id: int, payment_method: str) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        sends = [NotificationService.send_order_confirmation, NotificationService.send_admin_order_notification]
        if payment_method != PaymentMethod.COD.value:
            sends.append(
                lambda session, o: NotificationService.send_order_status_update(session, o, "confirmed")
            )
        for send in sends:
            result = await send(db, order)
            if not result.success:
                # a failed send rolled the session back and expired the order
                order = await OrderRepository.get_order(db, order_id)
        return order
