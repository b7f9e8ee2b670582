"""Tests for checkout orchestration."""

import pytest
from sqlalchemy import func, select

from conftest import DecliningGateway, make_address, make_checkout, make_item
from services.cart_service.repository import DatabaseStorage
from services.cart_service.service import CartStore, session_cart_key
from services.checkout_service import checkout_saga
from services.checkout_service.service import CheckoutService, validate_address
from services.coupon_service.models import Coupon, CouponUsage
from services.notification_service.models import AdminNotification, Notification
from services.notification_service.repository import NotificationRepository
from services.order_service.models import Order, OrderItem
from services.payment_service.models import Payment
from shared.errors import CheckoutValidationError, CouponError, NotFoundError, PersistenceError


async def count(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def cart_items(db, session_id="sess-1"):
    return await CartStore(DatabaseStorage(db), key=session_cart_key(session_id)).get_items()


@pytest.fixture
def welcome_coupon(db):
    async def create(**overrides):
        fields = {"code": "WELCOME10", "type": "percentage", "value": 10, "maximum_discount_amount": 200}
        fields.update(overrides)
        coupon = Coupon(**fields)
        db.add(coupon)
        await db.commit()
        return coupon

    return create


class TestValidation:
    async def test_empty_cart_rejected(self, db, gateway, shopper):
        with pytest.raises(CheckoutValidationError, match="cart is empty"):
            await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())
        assert await count(db, Order) == 0

    async def test_cod_below_minimum_rejected(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(unit_price=59.99))

        with pytest.raises(CheckoutValidationError, match="Minimum order amount for COD"):
            await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        assert await count(db, Order) == 0
        assert await count(db, Notification) == 0
        assert len(await cart_items(db)) == 1

    async def test_cod_just_below_minimum_rejected(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(unit_price=499.99))
        with pytest.raises(CheckoutValidationError, match="Minimum order amount for COD"):
            await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())
        assert await count(db, Order) == 0

    async def test_cod_exactly_at_minimum_accepted(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(unit_price=50.0, quantity=10))
        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())
        assert result.success
        assert result.order.subtotal == 500.0
        assert result.order.total_amount == 739.0

    async def test_unknown_payment_method_rejected(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))
        with pytest.raises(CheckoutValidationError, match="Unsupported payment method"):
            await CheckoutService.checkout(
                db, gateway, shopper.id, make_checkout(payment_method="bitcoin")
            )
        assert await count(db, Order) == 0

    async def test_invalid_coupon_rejected(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))
        with pytest.raises(CouponError):
            await CheckoutService.checkout(
                db, gateway, shopper.id, make_checkout(coupon_code="NOPE")
            )
        assert await count(db, Order) == 0

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"full_name": ""}, "full name"),
            ({"phone": "  "}, "phone number"),
            ({"address_line_1": ""}, "your address"),
            ({"city": "other"}, "city"),
            ({"state": ""}, "state"),
            ({"postal_code": ""}, "postal code"),
            ({"postal_code": "56001"}, "6-digit PIN"),
            ({"postal_code": "56000A"}, "6-digit PIN"),
        ],
    )
    def test_address_checks(self, overrides, message):
        with pytest.raises(CheckoutValidationError, match=message):
            validate_address(make_address(**overrides))

    def test_complete_address_passes(self):
        validate_address(make_address())


class TestCartOwnership:
    async def test_cart_claimed_by_another_shopper_is_not_found(
        self, db, gateway, shopper, admin, fill_cart
    ):
        await fill_cart("sess-1", make_item(quantity=10))
        await CartStore(DatabaseStorage(db), key=session_cart_key("sess-1"), user_id=shopper.id).ensure_access()

        with pytest.raises(NotFoundError):
            await CheckoutService.checkout(db, gateway, admin.id, make_checkout())

        assert await count(db, Order) == 0
        assert len(await cart_items(db)) == 1

    async def test_checkout_claims_an_anonymous_cart(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(unit_price=499.99))
        with pytest.raises(CheckoutValidationError):
            await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())
        store = CartStore(DatabaseStorage(db), key=session_cart_key("sess-1"))
        assert await store.get_owner() == shopper.id


class TestCashOnDelivery:
    async def test_cod_order_is_confirmed_with_payment_pending(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        assert result.success
        order = result.order
        assert order.status == "confirmed"
        assert order.payment_status == "pending"
        assert order.payment_intent_id is None
        assert order.subtotal == 600.0
        assert order.tax_amount == 108.0
        assert order.shipping_amount == 99.0
        assert order.cod_charge == 50.0
        assert order.total_amount == 857.0
        assert order.order_number.startswith("PF-")
        assert order.customer_email == "shopper@example.com"
        assert [t.status for t in order.tracking] == ["Order Placed", "Order Confirmed"]

    async def test_cod_never_touches_the_gateway(self, db, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))
        result = await CheckoutService.checkout(db, DecliningGateway(), shopper.id, make_checkout())
        assert result.success
        assert await count(db, Payment) == 0

    async def test_items_snapshot_cart_prices(self, db, gateway, shopper, fill_cart):
        await fill_cart(
            "sess-1",
            make_item(quantity=5),
            make_item(product_id="creatine", name="Creatine", unit_price=45.5, quantity=6),
        )

        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        items = {item.product_id: item for item in result.order.items}
        assert items["whey-1"].unit_price == 60.0
        assert items["whey-1"].total_price == 300.0
        assert items["creatine"].product_name == "Creatine"
        assert items["creatine"].total_price == 273.0

    async def test_notifications_and_cart_cleared(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        notifications = (await db.execute(select(Notification))).scalars().all()
        assert [n.type for n in notifications] == ["order_confirmed"]
        assert notifications[0].user_id == shopper.id
        assert notifications[0].data["order_number"] == result.order.order_number

        alerts = (await db.execute(select(AdminNotification))).scalars().all()
        assert len(alerts) == 1
        assert alerts[0].type == "new_order"
        assert alerts[0].data["is_cod"] is True

        assert await cart_items(db) == []

    async def test_billing_defaults_to_shipping(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=10))
        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())
        assert result.order.billing_address["postal_code"] == "560001"
        assert result.order.billing_address["type"] == "billing"


class TestPrepaid:
    async def test_card_payment_marks_order_paid(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(unit_price=749.0, quantity=2))

        result = await CheckoutService.checkout(
            db, gateway, shopper.id, make_checkout(payment_method="credit_card")
        )

        order = result.order
        assert result.success
        assert order.status == "confirmed"
        assert order.payment_status == "paid"
        assert order.payment_intent_id.startswith("card_")
        assert order.total_amount == 1767.64
        assert order.tracking[-1].status == "Payment Confirmed"

        payments = (await db.execute(select(Payment))).scalars().all()
        assert [(p.kind, p.status) for p in payments] == [("charge", "success")]
        assert payments[0].transaction_id == order.payment_intent_id

    async def test_prepaid_sends_status_update_too(self, db, gateway, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=2))
        await CheckoutService.checkout(db, gateway, shopper.id, make_checkout(payment_method="upi"))
        assert await count(db, Notification) == 2
        assert await count(db, AdminNotification) == 1

    async def test_declined_payment_cancels_order_and_keeps_cart(self, db, shopper, fill_cart):
        await fill_cart("sess-1", make_item(quantity=2))

        result = await CheckoutService.checkout(
            db, DecliningGateway(), shopper.id, make_checkout(payment_method="debit_card")
        )

        assert not result.success
        assert result.error == "Card declined by issuer"
        assert result.order.status == "cancelled"
        assert result.order.payment_status == "failed"
        assert result.order.tracking[-1].status == "Order Cancelled"
        assert len(await cart_items(db)) == 1
        assert await count(db, Notification) == 0
        assert await count(db, AdminNotification) == 0

        payments = (await db.execute(select(Payment))).scalars().all()
        assert [(p.kind, p.status) for p in payments] == [("charge", "failed")]


class TestCoupons:
    async def test_oversized_percentage_coupon_capped_at_subtotal(
        self, db, gateway, shopper, fill_cart, welcome_coupon
    ):
        # rows written outside the admin API can still carry a bad value
        await welcome_coupon(code="MEGA150", value=150, maximum_discount_amount=None)
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(
            db, gateway, shopper.id, make_checkout(payment_method="upi", coupon_code="MEGA150")
        )

        order = result.order
        assert order.discount_amount == 600.0
        assert order.total_amount == 207.0
        assert order.total_amount == round(
            order.subtotal + order.tax_amount + order.shipping_amount
            + order.cod_charge - order.discount_amount,
            2,
        )

    async def test_coupon_discount_applied_and_recorded(self, db, gateway, shopper, fill_cart, welcome_coupon):
        coupon = await welcome_coupon()
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(
            db, gateway, shopper.id, make_checkout(payment_method="upi", coupon_code="welcome10")
        )

        assert result.order.discount_amount == 60.0
        assert result.order.total_amount == 747.0
        assert result.order.coupon_code == "WELCOME10"
        await db.refresh(coupon)
        assert coupon.used_count == 1
        assert await count(db, CouponUsage) == 1

    async def test_coupon_only_once_per_user(self, db, gateway, shopper, fill_cart, welcome_coupon):
        await welcome_coupon()
        await fill_cart("sess-1", make_item(quantity=10))
        await CheckoutService.checkout(
            db, gateway, shopper.id, make_checkout(payment_method="upi", coupon_code="WELCOME10")
        )
        await fill_cart("sess-1", make_item(quantity=10))

        with pytest.raises(CouponError, match="already used"):
            await CheckoutService.checkout(
                db, gateway, shopper.id, make_checkout(payment_method="upi", coupon_code="WELCOME10")
            )

    async def test_declined_payment_releases_coupon(self, db, shopper, fill_cart, welcome_coupon):
        coupon = await welcome_coupon()
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(
            db, DecliningGateway(), shopper.id,
            make_checkout(payment_method="upi", coupon_code="WELCOME10"),
        )

        assert not result.success
        await db.refresh(coupon)
        assert coupon.used_count == 0
        assert await count(db, CouponUsage) == 0


class TestFailures:
    async def test_failed_item_insert_leaves_no_order(self, db, gateway, shopper, fill_cart, monkeypatch):
        def broken_item(**fields):
            fields["product_name"] = None
            return OrderItem(**fields)

        monkeypatch.setattr(checkout_saga, "OrderItem", broken_item)
        await fill_cart("sess-1", make_item(quantity=10))

        with pytest.raises(PersistenceError) as exc:
            await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        assert exc.value.step == "create_order"
        assert await count(db, Order) == 0
        assert await count(db, OrderItem) == 0
        assert len(await cart_items(db)) == 1

    async def test_charged_payment_refunded_when_confirmation_fails(
        self, db, gateway, shopper, fill_cart, monkeypatch
    ):
        async def failing_confirm(ctx):
            raise RuntimeError("database went away")

        monkeypatch.setattr(checkout_saga, "confirm_order", failing_confirm)
        await fill_cart("sess-1", make_item(quantity=10))

        with pytest.raises(PersistenceError):
            await CheckoutService.checkout(
                db, gateway, shopper.id, make_checkout(payment_method="credit_card")
            )

        order = (await db.execute(select(Order))).scalars().one()
        assert order.status == "cancelled"
        assert order.payment_status == "refunded"

        payments = (await db.execute(select(Payment).order_by(Payment.id))).scalars().all()
        assert [(p.kind, p.status) for p in payments] == [("charge", "success"), ("refund", "success")]
        assert payments[1].transaction_id.startswith("refund_")
        assert len(await cart_items(db)) == 1

    async def test_notification_failure_does_not_block_checkout(
        self, db, gateway, shopper, fill_cart, monkeypatch
    ):
        async def broken_create(session, notification):
            raise RuntimeError("notifications table is gone")

        monkeypatch.setattr(NotificationRepository, "create", staticmethod(broken_create))
        await fill_cart("sess-1", make_item(quantity=10))

        result = await CheckoutService.checkout(db, gateway, shopper.id, make_checkout())

        assert result.success
        assert result.order.status == "confirmed"
        assert await count(db, Notification) == 0
        assert await count(db, AdminNotification) == 1
        assert await cart_items(db) == []
