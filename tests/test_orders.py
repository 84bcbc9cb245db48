"""Checkout: order placement (COD and online), totals, stock, coupon."""
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from naturalpuff.core.database import engine
from naturalpuff.models import Order, Product
from tests.conftest import fetch


def _checkout(product_id: int, quantity: int = 1, **kw) -> dict:
    body = {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "customer_name": "Asha Verma",
        "customer_email": "asha@example.com",
        "customer_phone": "9876543210",
        "address": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "pincode": "411001",
        "payment_method": "cod",
    }
    body.update(kw)
    return body


def test_cod_order_totals_and_stock(client: TestClient, make_product):
    pid = make_product(price=2940, stock=8)  # shown as ₹294
    r = client.post("/api/orders", json=_checkout(pid, quantity=3, shipping_cost=40))
    assert r.status_code == 201
    j = r.json()
    order = j["order"]
    assert order["status"] == "pending"
    assert order["subtotal"] == 882
    assert order["shipping_cost"] == 40
    assert order["total_amount"] == 922
    assert order["items"] == [{"product_id": pid, "product_name": "Classic Salted Makhana", "quantity": 3, "price": 294}]
    assert j["razorpay_order"] is None
    assert fetch(Product, pid).stock == 5


def test_order_with_coupon(client: TestClient, make_product, make_coupon):
    pid = make_product(price=500, stock=10)
    make_coupon(code="PUFF10", discount_percent=10)
    r = client.post("/api/orders", json=_checkout(pid, quantity=2, coupon_code="puff10"))
    assert r.status_code == 201
    order = r.json()["order"]
    assert order["discount_amount"] == 100
    assert order["total_amount"] == 900
    assert order["coupon_code"] == "PUFF10"


def test_order_with_invalid_coupon_is_rejected(client: TestClient, make_product, make_coupon):
    pid = make_product(price=500, stock=10)
    make_coupon(code="BIG", discount_percent=10, min_order_value=2000)
    r = client.post("/api/orders", json=_checkout(pid, coupon_code="BIG"))
    assert r.status_code == 400
    assert r.json()["error"] == "Minimum order value for this coupon is ₹2000."


def test_order_stock_checks(client: TestClient, make_product):
    empty = make_product(name="Sold Out", stock=0)
    few = make_product(name="Few Left", stock=2)
    r = client.post("/api/orders", json=_checkout(empty))
    assert r.status_code == 400
    assert r.json()["error"] == "Sold Out is out of stock."
    r = client.post("/api/orders", json=_checkout(few, quantity=3))
    assert r.status_code == 400
    assert r.json()["error"] == "Only 2 of Few Left left in stock."


def test_order_unknown_product(client: TestClient):
    r = client.post("/api/orders", json=_checkout(987654))
    assert r.status_code == 404


def test_order_requires_items(client: TestClient):
    r = client.post("/api/orders", json={"items": [], "customer_name": "Asha"})
    assert r.status_code == 422


def test_online_order_creates_gateway_order(client: TestClient, make_product, razorpay_api):
    razorpay_api.add("POST", "/orders", 200, {"id": "order_ABC123", "amount": 59800, "currency": "INR", "status": "created"})
    pid = make_product(price=299, stock=10)
    r = client.post("/api/orders", json=_checkout(pid, quantity=2, payment_method="online"))
    assert r.status_code == 201
    j = r.json()
    assert j["razorpay_order"]["id"] == "order_ABC123"
    assert j["razorpay_key_id"] == "rzp_test_key"
    order = fetch(Order, j["order"]["id"])
    assert order.status == "created"
    assert order.razorpay_order_id == "order_ABC123"
    sent = razorpay_api.calls[0]
    assert sent["payload"]["amount"] == 59800
    assert sent["payload"]["notes"]["order_id"] == order.id
    assert sent["headers"]["Authorization"].startswith("Basic ")
    # Stock is only taken once the payment is verified
    assert fetch(Product, pid).stock == 10


def test_online_order_gateway_failure(client: TestClient, make_product, razorpay_api):
    razorpay_api.add("POST", "/orders", 400, {"error": {"description": "Amount exceeds maximum amount allowed."}})
    pid = make_product(price=299, stock=10)
    r = client.post("/api/orders", json=_checkout(pid, payment_method="online"))
    assert r.status_code == 502
    assert r.json()["error"] == "Amount exceeds maximum amount allowed."
    with Session(engine) as s:
        orders = s.exec(select(Order)).all()
    assert [o.status for o in orders] == ["failed"]
    assert fetch(Product, pid).stock == 10


def test_get_order(client: TestClient, make_order):
    order_id = make_order()
    r = client.get(f"/api/orders/{order_id}")
    assert r.status_code == 200
    j = r.json()
    assert j["id"] == order_id
    assert j["items"][0]["quantity"] == 2
    assert client.get("/api/orders/does-not-exist").status_code == 404


def test_order_rejects_invalid_email(client: TestClient, make_product):
    pid = make_product(stock=10)
    r = client.post("/api/orders", json=_checkout(pid, customer_email="asha@"))
    assert r.status_code == 422
    assert r.json()["error"].startswith("customer_email:")
    assert fetch(Product, pid).stock == 10
