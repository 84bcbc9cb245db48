"""Pytest fixtures: test client, test DB (in-memory SQLite), factories, fake gateways."""
import hashlib
import hmac
import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

# In-memory SQLite and dummy credentials; must be set before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_SECRET", "test-admin-secret")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_key_secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "test_webhook_secret")
os.environ.setdefault("SMTP_HOST", "smtp.test.local")
os.environ.setdefault("SMTP_USER", "shop@test.local")
os.environ.setdefault("SMTP_PASSWORD", "smtp-password")
os.environ.setdefault("ADMIN_EMAIL", "admin@test.local")
os.environ.setdefault("SHIPROCKET_EMAIL", "ship@test.local")
os.environ.setdefault("SHIPROCKET_PASSWORD", "ship-password")
os.environ.setdefault("SHIPROCKET_PICKUP_PINCODE", "110001")
# High limits so the whole suite fits in one window
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_REGISTER_PER_MINUTE", "100")
os.environ.setdefault("RATE_LIMIT_LOGIN_PER_MINUTE", "100")
os.environ.setdefault("RATE_LIMIT_PAYMENT_PER_MINUTE", "1000")

from naturalpuff.core.database import engine, init_db
from naturalpuff.main import app
from naturalpuff.models import (
    ContactMessage,
    Coupon,
    ErrorLog,
    MarketingOffer,
    Order,
    OrderItem,
    Product,
    ProductReview,
    ReviewVote,
)
from naturalpuff.services import shiprocket

init_db()

ADMIN_HEADERS = {"X-Admin-Secret": "test-admin-secret"}


@pytest.fixture(scope="function")
def client():
    """TestClient; lifespan creates the tables."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _clean_tables():
    """Storefront tables start empty in every test; users persist for the session token."""
    yield
    with Session(engine) as s:
        for model in (
            ReviewVote, ProductReview, OrderItem, Order, Product, Coupon, MarketingOffer, ContactMessage, ErrorLog,
        ):
            s.execute(model.__table__.delete())
        s.commit()
    shiprocket.clear_token_cache()


@pytest.fixture
def admin_headers() -> dict:
    return dict(ADMIN_HEADERS)


def fetch(model, pk):
    """Fresh copy of a row, outside any request session."""
    with Session(engine) as s:
        return s.get(model, pk)


@pytest.fixture
def make_product():
    def _make(**kw) -> int:
        values = {"name": "Classic Salted Makhana", "price": 299, "stock": 50, "category": "Makhana"}
        values.update(kw)
        with Session(engine) as s:
            p = Product(**values)
            s.add(p)
            s.commit()
            s.refresh(p)
            return p.id
    return _make


@pytest.fixture
def make_coupon():
    def _make(**kw) -> int:
        values = {"code": "PUFF10", "discount_percent": 10, "is_active": True}
        values.update(kw)
        with Session(engine) as s:
            c = Coupon(**values)
            s.add(c)
            s.commit()
            s.refresh(c)
            return c.id
    return _make


@pytest.fixture
def make_order(make_product):
    """Online order waiting for payment: one line of 2 x ₹299."""
    def _make(razorpay_order_id: str = "order_TEST123", status: str = "created", **kw) -> str:
        product_id = kw.pop("product_id", None) or make_product(stock=10)
        values = {
            "total_amount": 598,
            "subtotal": 598,
            "customer_name": "Asha Verma",
            "customer_email": "asha@example.com",
            "customer_phone": "9876543210",
            "address": "12 MG Road",
            "city": "Pune",
            "state": "Maharashtra",
            "pincode": "411001",
            "razorpay_order_id": razorpay_order_id,
            "status": status,
            "created_at": datetime(2024, 5, 1, 10, 30),
        }
        values.update(kw)
        with Session(engine) as s:
            order = Order(**values)
            s.add(order)
            s.add(OrderItem(order_id=order.id, product_id=product_id, product_name="Classic Salted Makhana", quantity=2, price=299))
            s.commit()
            return order.id
    return _make


def razorpay_signature(order_id: str, payment_id: str, secret: str = "test_key_secret") -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def webhook_signature(body: bytes, secret: str = "test_webhook_secret") -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class FakeUpstream:
    """Stands in for core.http.request_json; answers by (method, url suffix)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, dict]] = {}
        self.calls: list[dict] = []

    def add(self, method: str, suffix: str, status: int, body: dict):
        self.routes[(method.upper(), suffix)] = (status, body)

    def count(self, suffix: str) -> int:
        return sum(1 for c in self.calls if c["url"].endswith(suffix))

    def __call__(self, method, url, *, headers=None, payload=None, params=None, timeout=20):
        self.calls.append({"method": method, "url": url, "headers": headers or {}, "payload": payload, "params": params})
        for (m, suffix), answer in self.routes.items():
            if m == method.upper() and url.endswith(suffix):
                return answer
        return 404, {"message": "no fake route"}


@pytest.fixture
def razorpay_api(monkeypatch):
    fake = FakeUpstream()
    monkeypatch.setattr("naturalpuff.services.razorpay.request_json", fake)
    return fake


@pytest.fixture
def shiprocket_api(monkeypatch):
    fake = FakeUpstream()
    fake.add("POST", "/auth/login", 200, {"token": "sr-token-1"})
    monkeypatch.setattr("naturalpuff.services.shiprocket.request_json", fake)
    return fake


@pytest.fixture(scope="session")
def _auth_token():
    """One register + login for the whole session."""
    with TestClient(app) as auth_client:
        auth_client.post(
            "/auth/register",
            data={
                "email": "test@example.com",
                "password": "test123456",
                "full_name": "Test User",
                "phone": "+919812345678",
            },
        )
        r = auth_client.post(
            "/auth/login",
            data={"email": "test@example.com", "password": "test123456"},
        )
        assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
        return r.json().get("access_token")


@pytest.fixture
def auth_headers(_auth_token):
    return {"Authorization": f"Bearer {_auth_token}"}
