"""Checkout steps and their compensations.

Every step reads and writes the shared ``ctx`` dict:

    db, gateway, user_id, customer_email, request, cart_items, totals, coupon
        set by the caller before the saga runs
    order_id, coupon_id, payment_id, refund_id, failure_reason
        filled in by the steps
"""
import logging

from services.coupon_service.service import CouponService
from services.order_service.models import Order, OrderItem, OrderTracking
from services.order_service.repository import OrderRepository
from services.order_service.service import generate_order_number
from services.order_service.status import OrderStatus, PaymentStatus, ensure_transition
from services.payment_service.gateways import CustomerDetails, PaymentRequest
from services.payment_service.service import PaymentService
from shared.config.settings import CURRENCY
from shared.errors import PaymentDeclinedError
from .saga import SagaOrchestrator

logger = logging.getLogger(__name__)


def _is_cod(ctx: dict) -> bool:
    return ctx["request"].payment_method == "cod"

# --- ACTIONS ---

async def create_order(ctx: dict):
    """Order row, one item per cart line and the 'Order Placed' entry, in one commit."""
    db, request, totals = ctx["db"], ctx["request"], ctx["totals"]
    billing = request.billing_address or request.shipping_address.model_copy(update={"type": "billing"})

    order = Order(
        order_number=generate_order_number(),
        user_id=ctx["user_id"],
        status=OrderStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
        payment_method=request.payment_method,
        currency=CURRENCY,
        coupon_code=ctx["coupon"].code if ctx.get("coupon") else None,
        shipping_address=request.shipping_address.model_dump(),
        billing_address=billing.model_dump(),
        customer_email=ctx.get("customer_email"),
        notes=request.notes,
        **totals.model_dump(),
    )
    # Prices come from the cart snapshot, not the live catalogue
    items = [
        OrderItem(
            product_id=line.product_id,
            product_name=line.name,
            product_image=line.image,
            flavor=line.flavor,
            size=line.size,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=round(line.unit_price * line.quantity, 2),
        )
        for line in ctx["cart_items"]
    ]
    tracking = OrderTracking(
        status="Order Placed",
        message=(
            "Your COD order has been received. We will call you within 24 hours to confirm."
            if _is_cod(ctx)
            else "Your order has been received and is being processed."
        ),
    )
    order = await OrderRepository.create_order(db, order, items, tracking)
    ctx["order_id"] = order.id
    logger.info(f"Order {order.order_number} created with {len(items)} items")

async def redeem_coupon(ctx: dict):
    coupon = ctx.get("coupon")
    if coupon is None:
        return
    ctx["coupon_id"] = coupon.id
    await CouponService.record_usage(
        ctx["db"], coupon, ctx["user_id"], ctx["order_id"], ctx["totals"].discount_amount
    )

async def charge_payment(ctx: dict):
    # Cash on delivery is collected by the courier, outside this system
    if _is_cod(ctx):
        return

    db, request, totals = ctx["db"], ctx["request"], ctx["totals"]
    address = request.shipping_address
    payment_request = PaymentRequest(
        amount=totals.total_amount,
        currency=CURRENCY,
        payment_method=request.payment_method,
        order_id=ctx["order_id"],
        customer=CustomerDetails(
            name=address.full_name,
            email=ctx.get("customer_email") or "",
            phone=address.phone or "",
        ),
    )
    result = await PaymentService.process_payment(db, ctx["gateway"], payment_request)
    if not result.success:
        ctx["failure_reason"] = result.error or "Payment processing failed"
        raise PaymentDeclinedError(ctx["failure_reason"])
    ctx["payment_id"] = result.payment_id

async def confirm_order(ctx: dict):
    db = ctx["db"]
    order = await OrderRepository.get_order(db, ctx["order_id"])
    status = ensure_transition(order.status, OrderStatus.CONFIRMED)

    if _is_cod(ctx):
        await OrderRepository.update_order(
            db,
            order,
            tracking=OrderTracking(
                status="Order Confirmed",
                message="Your COD order has been confirmed. Our team will call you within 24 hours.",
            ),
            status=status.value,
            # COD stays pending until the courier collects the cash
            payment_status=PaymentStatus.PENDING.value,
        )
    else:
        await OrderRepository.update_order(
            db,
            order,
            tracking=OrderTracking(
                status="Payment Confirmed",
                message="Payment has been successfully processed.",
            ),
            status=status.value,
            payment_status=PaymentStatus.PAID.value,
            payment_intent_id=ctx["payment_id"],
        )


# --- COMPENSATIONS (Rollbacks) ---

async def cancel_order(ctx: dict):
    db = ctx["db"]
    await db.rollback()
    order = await OrderRepository.get_order(db, ctx["order_id"])
    if order is None:
        return

    payment_status = PaymentStatus.REFUNDED if ctx.get("refund_id") else PaymentStatus.FAILED
    reason = ctx.get("failure_reason") or "Order could not be completed."
    await OrderRepository.update_order(
        db,
        order,
        tracking=OrderTracking(status="Order Cancelled", message=reason),
        status=ensure_transition(order.status, OrderStatus.CANCELLED).value,
        payment_status=payment_status.value,
    )

async def release_coupon(ctx: dict):
    if ctx.get("coupon_id") is None:
        return
    db = ctx["db"]
    await db.rollback()
    await CouponService.release_usage(db, ctx["coupon_id"], ctx["user_id"])

async def refund_payment(ctx: dict):
    payment_id = ctx.get("payment_id")
    if not payment_id:
        return
    db = ctx["db"]
    await db.rollback()
    logger.info(f"Refunding transaction {payment_id} for order {ctx['order_id']}")
    result = await PaymentService.refund_payment(
        db,
        ctx["gateway"],
        order_id=ctx["order_id"],
        payment_id=payment_id,
        amount=ctx["totals"].total_amount,
        method=ctx["request"].payment_method,
        reason="checkout rolled back",
    )
    if result.success:
        ctx["refund_id"] = result.payment_id


# --- BUILDER FACTORY ---

def build_checkout_saga() -> SagaOrchestrator:
    saga = SagaOrchestrator("checkout")
    saga.add_step("create_order", create_order, cancel_order)
    saga.add_step("redeem_coupon", redeem_coupon, release_coupon)
    saga.add_step("charge_payment", charge_payment, refund_payment)
    saga.add_step("confirm_order", confirm_order, None) # cancel_order covers it
    return saga
