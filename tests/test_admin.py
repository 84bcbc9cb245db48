"""Admin API: secret check, catalog management, orders, inbox, dashboard, error log."""
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session

from naturalpuff.core.config import settings
from naturalpuff.core.database import engine
from naturalpuff.models import ContactMessage, ErrorLog, Order, Product
from tests.conftest import fetch


def test_wrong_secret_rejected(client: TestClient):
    assert client.get("/admin/stats").status_code == 403
    r = client.get("/admin/stats", headers={"X-Admin-Secret": "nope"})
    assert r.status_code == 403
    assert r.json()["error"] == "Unauthorized."


def test_secret_not_configured(client: TestClient, admin_headers, monkeypatch):
    monkeypatch.setattr(settings, "admin_secret", "")
    r = client.get("/admin/stats", headers=admin_headers)
    assert r.status_code == 503


def test_product_crud(client: TestClient, admin_headers):
    r = client.post(
        "/admin/products",
        json={
            "name": "  Peri Peri Makhana ",
            "price": 349,
            "stock": 3,
            "category": "Makhana",
            "details": {"sizes": ["80g", "150g"]},
        },
        headers=admin_headers,
    )
    assert r.status_code == 201
    product = r.json()
    assert product["name"] == "Peri Peri Makhana"
    assert product["stock_status"] == "low_stock"
    pid = product["id"]

    r = client.patch(f"/admin/products/{pid}", json={"stock": 0, "recommended_product_ids": [1, 2]}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["stock_status"] == "out_of_stock"
    assert fetch(Product, pid).recommended_product_ids == "[1, 2]"

    r = client.patch(f"/admin/products/{pid}", json={"name": "  "}, headers=admin_headers)
    assert r.status_code == 400

    assert client.delete(f"/admin/products/{pid}", headers=admin_headers).json() == {"success": True}
    assert fetch(Product, pid) is None
    assert client.delete(f"/admin/products/{pid}", headers=admin_headers).status_code == 404


def test_product_with_orders_cannot_be_deleted(client: TestClient, admin_headers, make_product, make_order):
    pid = make_product()
    make_order(product_id=pid)
    r = client.delete(f"/admin/products/{pid}", headers=admin_headers)
    assert r.status_code == 409


def test_coupon_codes_unique(client: TestClient, admin_headers):
    r = client.post("/admin/coupons", json={"code": "diwali20", "discount_percent": 20}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["code"] == "DIWALI20"
    r = client.post("/admin/coupons", json={"code": " Diwali20 ", "discount_percent": 5}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "This coupon code already exists."


def test_coupon_deactivate(client: TestClient, admin_headers, make_coupon):
    cid = make_coupon()
    r = client.patch(f"/admin/coupons/{cid}", json={"is_active": False}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    r = client.get("/api/coupons/validate", params={"code": "PUFF10", "subtotal": 500})
    assert r.json()["valid"] is False


def test_offers(client: TestClient, admin_headers):
    expires = (datetime.utcnow() + timedelta(days=3)).isoformat()
    r = client.post("/admin/offers", json={"title": "Festive combo", "expires_at": expires}, headers=admin_headers)
    assert r.status_code == 201
    oid = r.json()["id"]
    assert [o["title"] for o in client.get("/api/offers").json()] == ["Festive combo"]

    past = (datetime.utcnow() - timedelta(days=1)).isoformat()
    r = client.put(f"/admin/offers/{oid}", json={"title": "Festive combo", "expires_at": past}, headers=admin_headers)
    assert r.status_code == 200
    assert client.get("/api/offers").json() == []
    assert len(client.get("/admin/offers", headers=admin_headers).json()) == 1


def test_order_list_and_status(client: TestClient, admin_headers, make_order, make_product):
    pid = make_product(stock=10)
    order_id = make_order(product_id=pid)
    r = client.get("/admin/orders", params={"status": "created", "q": "asha"}, headers=admin_headers)
    assert [o["id"] for o in r.json()] == [order_id]
    assert client.get("/admin/orders", params={"status": "bogus"}, headers=admin_headers).status_code == 400

    r = client.patch(f"/admin/orders/{order_id}/status", json={"status": "paid"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "paid"
    assert fetch(Product, pid).stock == 8

    r = client.patch(f"/admin/orders/{order_id}/status", json={"status": "created"}, headers=admin_headers)
    assert r.status_code == 409

    r = client.patch(f"/admin/orders/{order_id}/status", json={"status": "shipped"}, headers=admin_headers)
    assert r.status_code == 200
    assert fetch(Order, order_id).status == "shipped"


def test_contact_inbox(client: TestClient, admin_headers):
    with Session(engine) as s:
        msg = ContactMessage(name="Ravi", email="ravi@example.com", subject="Bulk order", message="500 packs?")
        s.add(msg)
        s.commit()
        s.refresh(msg)
        mid = msg.id
    r = client.get("/admin/contact-messages", params={"responded": False}, headers=admin_headers)
    assert [m["id"] for m in r.json()] == [mid]

    r = client.patch(f"/admin/contact-messages/{mid}", json={"responded": True, "notes": "Called back"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["responded"] is True
    assert r.json()["responded_at"] is not None
    assert client.get("/admin/contact-messages", params={"responded": False}, headers=admin_headers).json() == []


def test_stats(client: TestClient, admin_headers, make_product, make_order):
    make_product(stock=0)
    make_order(status="paid")
    make_order(razorpay_order_id="order_TWO", status="created")
    r = client.get("/admin/stats", headers=admin_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["total_orders"] == 2
    assert data["total_revenue"] == 598
    assert data["total_products"] == 3
    assert data["out_of_stock_products"] == 1
    assert data["orders_by_status"] == {"paid": 1, "created": 1}
    assert len(data["recent_orders"]) == 2


def test_error_log(client: TestClient, admin_headers):
    with Session(engine) as s:
        row = ErrorLog(endpoint="/api/orders", method="POST", request_id="req-1", error_message="boom")
        s.add(row)
        s.commit()
        s.refresh(row)
        eid = row.id
    r = client.get("/admin/errors", headers=admin_headers)
    assert r.json()[0]["request_id"] == "req-1"
    assert client.get(f"/admin/errors/{eid}", headers=admin_headers).json()["error_message"] == "boom"
    assert client.get("/admin/errors/999999", headers=admin_headers).status_code == 404


def test_cod_order_marked_paid_keeps_stock(client: TestClient, admin_headers, make_product, make_order):
    pid = make_product(stock=10)
    order_id = make_order(product_id=pid, payment_method="cod", status="pending", razorpay_order_id=None)
    r = client.patch(f"/admin/orders/{order_id}/status", json={"status": "paid"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["paid_at"] is not None
    # COD stock was taken when the order was placed
    assert fetch(Product, pid).stock == 10


def test_users_list_with_order_totals(client: TestClient, admin_headers, auth_headers, make_order):
    uid = client.get("/auth/me", headers=auth_headers).json()["id"]
    make_order(user_id=uid, status="paid", paid_at=datetime(2024, 5, 1, 11, 0))
    make_order(user_id=uid, status="created", razorpay_order_id="order_UNPAID")
    make_order(status="paid", paid_at=datetime(2024, 5, 2), razorpay_order_id="order_GUEST")

    assert client.get("/admin/users").status_code == 403
    r = client.get("/admin/users", params={"q": "test@example.com"}, headers=admin_headers)
    assert r.status_code == 200
    rows = r.json()
    assert [u["email"] for u in rows] == ["test@example.com"]
    assert rows[0]["full_name"] == "Test User"
    assert rows[0]["order_count"] == 2
    # Unpaid orders are not counted as spent
    assert rows[0]["total_spent"] == 598
    assert "hashed_password" not in rows[0]


def test_user_detail_lists_orders_with_items(client: TestClient, admin_headers, auth_headers, make_order):
    uid = client.get("/auth/me", headers=auth_headers).json()["id"]
    order_id = make_order(user_id=uid, status="shipped", paid_at=datetime(2024, 5, 1, 11, 0))
    r = client.get(f"/admin/users/{uid}", headers=admin_headers)
    assert r.status_code == 200
    j = r.json()
    assert j["email"] == "test@example.com"
    assert [o["id"] for o in j["orders"]] == [order_id]
    item = j["orders"][0]["items"][0]
    assert (item["product_name"], item["quantity"], item["price"]) == ("Classic Salted Makhana", 2, 299)
    assert client.get("/admin/users/999999", headers=admin_headers).status_code == 404


def test_user_lookup_by_order(client: TestClient, admin_headers, auth_headers, make_order):
    uid = client.get("/auth/me", headers=auth_headers).json()["id"]
    own = make_order(user_id=uid)
    guest = make_order(razorpay_order_id="order_GUEST")
    j = client.get(f"/admin/users/by-order/{own}", headers=admin_headers).json()
    assert j["order"]["id"] == own
    assert j["user"]["id"] == uid
    j = client.get(f"/admin/users/by-order/{guest}", headers=admin_headers).json()
    assert j["user"] is None
    assert j["order"]["customer_name"] == "Asha Verma"
    assert client.get("/admin/users/by-order/missing", headers=admin_headers).status_code == 404
