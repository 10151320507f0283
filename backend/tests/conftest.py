import sys
import os
import hmac
import hashlib
import json
import time
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

# Add the backend directory to the Python path
# This is necessary for pytest to find the 'main' module and other packages
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.database import get_db, Base
import models  # noqa: F401  registers every table on Base.metadata
from models.discounts import DiscountCode
from models.orders import Order, OrderItem
from services.auth import AuthService
from services.payment_gateway import (
    CreatedPaymentIntent,
    PaymentGatewayError,
    StripePaymentGateway,
    get_payment_gateway,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
WEBHOOK_SECRET = "whsec_test_secret_key_for_webhook_verification"
ADMIN_EMAIL = "owner@kindkandles.com"
ADMIN_PASSWORD = "wick-and-wax-2024"


class FakePaymentGateway(StripePaymentGateway):
    """
    Real Stripe webhook verification, recorded payment intent creation.
    """

    def __init__(self, configured: bool = True, fail: bool = False):
        super().__init__(
            api_key="sk_test_fake" if configured else "",
            webhook_secret=WEBHOOK_SECRET,
        )
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    async def create_payment_intent(self, amount, currency, metadata, receipt_email=None, shipping=None):
        self.calls.append({
            "amount": amount,
            "currency": currency,
            "metadata": metadata,
            "receipt_email": receipt_email,
            "shipping": shipping,
        })
        if self.fail:
            raise PaymentGatewayError("Your card was declined (req_123 sk_test_fake)")
        number = len(self.calls)
        return CreatedPaymentIntent(
            id=f"pi_test_{number}",
            client_secret=f"pi_test_{number}_secret_abc",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
        )


def generate_stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Generate a valid Stripe webhook signature"""
    if timestamp is None:
        timestamp = int(time.time())

    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode('utf-8'),
        signed_payload.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()

    return f"t={timestamp},v1={signature}"


def build_event(event_type: str, data_object: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": data_object},
    }).encode("utf-8")


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
async def client(session_factory, payment_gateway):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_discount(session_factory):
    async def _make(code: str = "SAVE10", type: str = "percentage", value="10", **fields) -> DiscountCode:
        fields.setdefault("uses", 0)
        fields.setdefault("active", True)
        async with session_factory() as session:
            discount = DiscountCode(code=code, type=type, value=Decimal(str(value)), **fields)
            session.add(discount)
            await session.commit()
            await session.refresh(discount)
            return discount
    return _make


@pytest.fixture
def make_order(session_factory):
    async def _make(
        payment_intent_id: Optional[str] = "pi_test_1",
        payment_status: str = "pending",
        status: str = "pending",
        order_number: Optional[str] = None,
        discount_code: Optional[str] = None,
    ) -> Order:
        async with session_factory() as session:
            order = Order(
                order_number=order_number or f"KK-20240101-{os.urandom(3).hex().upper()}",
                customer_email="jane@kindkandles.com",
                customer_name="Jane Doe",
                shipping_address_line1="12 Wick Lane",
                shipping_city="Asheville",
                shipping_state="NC",
                shipping_postal_code="28801",
                shipping_country="US",
                subtotal=Decimal("50.00"),
                shipping_cost=Decimal("5.00"),
                tax=Decimal("3.00"),
                discount=Decimal("0.00"),
                total=Decimal("58.00"),
                discount_code=discount_code,
                status=status,
                payment_status=payment_status,
                payment_intent_id=payment_intent_id,
            )
            order.items = [
                OrderItem(
                    product_id="candle-lavender",
                    title="Lavender Soy Candle",
                    quantity=2,
                    price=Decimal("25.00"),
                    total=Decimal("50.00"),
                )
            ]
            session.add(order)
            await session.commit()
            await session.refresh(order)
            return order
    return _make


@pytest.fixture
def fetch_order(session_factory):
    async def _fetch(order_id) -> Order:
        async with session_factory() as session:
            return await session.get(Order, order_id)
    return _fetch


@pytest.fixture
def fetch_discount(session_factory):
    async def _fetch(discount_id) -> DiscountCode:
        async with session_factory() as session:
            return await session.get(DiscountCode, discount_id)
    return _fetch


@pytest.fixture
async def admin_user(session_factory):
    async with session_factory() as session:
        return await AuthService(session).create_admin(
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            first_name="Kara",
            last_name="Wick",
        )


@pytest.fixture
async def admin_client(client, admin_user):
    response = await client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)
