"""Pytest fixtures for storefront tests."""

import os

# Settings and the JWT handler read the environment at import time
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OTEL_ENABLED"] = "false"
os.environ["CHECKOUT_RATE_LIMIT"] = "1000/minute"
os.environ["PAYMENT_SIMULATED_DELAY"] = "0"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from services.address_service.main import address_app
from services.auth_service.main import auth_app
from services.auth_service.models import User
from services.cart_service.main import cart_app
from services.cart_service.repository import DatabaseStorage
from services.cart_service.schemas import CartItemCreate
from services.cart_service.service import CartStore, session_cart_key
from services.checkout_service.main import checkout_app
from services.checkout_service.schemas import CheckoutRequest
from services.coupon_service.main import coupon_app
from services.notification_service.main import notification_app
from services.order_service.main import order_app
from services.order_service.schemas import Address
from services.payment_service.gateways import PaymentResult, SimulatedGateway
from services.payment_service.main import payment_app
from services.payment_service.service import get_payment_gateway
from services.return_service.main import return_app
from shared.config.database import Base, get_db
from shared.security import create_access_token

SUB_APPS = [
    address_app,
    auth_app,
    cart_app,
    checkout_app,
    coupon_app,
    notification_app,
    order_app,
    payment_app,
    return_app,
]


class DecliningGateway(SimulatedGateway):
    """Gateway whose issuer turns every charge down."""

    async def process_payment(self, request):
        return PaymentResult(success=False, error="Card declined by issuer")


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    return SimulatedGateway(delay=0)


@pytest_asyncio.fixture
async def client(session_factory, gateway):
    """HTTP client against the root app with every sub-app on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    for sub_app in SUB_APPS:
        sub_app.dependency_overrides[get_db] = override_get_db
        sub_app.dependency_overrides[get_payment_gateway] = lambda: gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    for sub_app in SUB_APPS:
        sub_app.dependency_overrides.clear()


async def _create_user(db, email, is_admin=False):
    user = User(
        email=email,
        hashed_password="not-a-real-hash",
        full_name="Test Shopper",
        phone="9876543210",
        is_admin=is_admin,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def shopper(db):
    return await _create_user(db, "shopper@example.com")


@pytest_asyncio.fixture
async def admin(db):
    return await _create_user(db, "admin@example.com", is_admin=True)


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id), "admin": bool(user.is_admin)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def shopper_headers(shopper):
    return auth_headers(shopper)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


def make_item(**overrides) -> CartItemCreate:
    fields = {
        "product_id": "whey-1",
        "name": "Whey Protein",
        "unit_price": 60.0,
        "image": "/images/whey.png",
        "flavor": "chocolate",
        "size": "1kg",
        "quantity": 1,
    }
    fields.update(overrides)
    return CartItemCreate(**fields)


def make_address(**overrides) -> Address:
    fields = {
        "full_name": "Asha Rao",
        "phone": "9876543210",
        "address_line_1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
    }
    fields.update(overrides)
    return Address(**fields)


def make_checkout(session_id="sess-1", payment_method="cod", **overrides) -> CheckoutRequest:
    fields = {
        "session_id": session_id,
        "shipping_address": make_address(),
        "payment_method": payment_method,
    }
    fields.update(overrides)
    return CheckoutRequest(**fields)


@pytest.fixture
def fill_cart(db):
    """Put items into a session's database-backed cart."""

    async def fill(session_id="sess-1", *items):
        store = CartStore(DatabaseStorage(db), key=session_cart_key(session_id))
        for item in items or [make_item()]:
            await store.add_item(item)
        return store

    return fill
