"""Coupon validation: service rules and the storefront check endpoint."""
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session

from naturalpuff.core.database import engine
from naturalpuff.services.coupon import calculate_discount, validate_coupon


def test_calculate_discount_rounds_half_up():
    assert calculate_discount(1000, 10) == 100
    assert calculate_discount(295, 10) == 30  # 29.5
    assert calculate_discount(294, 10) == 29  # 29.4
    assert calculate_discount(500, 100) == 500
    assert calculate_discount(0, 10) == 0


def test_validate_coupon_rules(make_coupon):
    make_coupon(code="PUFF10", discount_percent=10)
    make_coupon(code="OLD", discount_percent=20, is_active=False)
    make_coupon(code="GONE", discount_percent=20, expires_at=datetime.utcnow() - timedelta(days=1))
    make_coupon(code="BIG", discount_percent=15, min_order_value=999)
    with Session(engine) as db:
        discount, coupon, error = validate_coupon(db, " puff10 ", 600)
        assert (discount, error) == (60, None)
        assert coupon.code == "PUFF10"

        assert validate_coupon(db, "", 600)[2] == "No coupon code entered."
        assert validate_coupon(db, "NOPE", 600)[2] == "Invalid coupon code."
        assert validate_coupon(db, "OLD", 600)[2] == "This coupon is no longer active."
        assert validate_coupon(db, "GONE", 600)[2] == "This coupon has expired."
        assert validate_coupon(db, "BIG", 998)[2] == "Minimum order value for this coupon is ₹999."
        assert validate_coupon(db, "BIG", 999)[0] == 150


def test_coupon_check_endpoint(client: TestClient, make_coupon):
    make_coupon(code="WELCOME5", discount_percent=5)
    r = client.get("/api/coupons/validate", params={"code": "welcome5", "subtotal": 890})
    assert r.status_code == 200
    j = r.json()
    assert j["valid"] is True
    assert j["discount"] == 45  # 44.5 rounds up
    assert j["total_after_discount"] == 845


def test_coupon_check_endpoint_rejects(client: TestClient):
    r = client.get("/api/coupons/validate", params={"code": "missing", "subtotal": 890})
    assert r.status_code == 200
    j = r.json()
    assert j["valid"] is False
    assert j["code"] == "MISSING"
    assert j["message"] == "Invalid coupon code."
