"""Storefront reads: products, recommendations, offers, contact form."""
import json
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from naturalpuff.core.database import engine
from naturalpuff.models import ContactMessage, MarketingOffer


def test_products_list_shows_corrected_price_and_stock(client: TestClient, make_product):
    make_product(name="Peri Peri Makhana", price=2940, stock=3)
    make_product(name="Mint Makhana", price=295, stock=0)
    r = client.get("/api/products")
    assert r.status_code == 200
    by_name = {p["name"]: p for p in r.json()}
    peri = by_name["Peri Peri Makhana"]
    assert peri["price"] == 294
    assert peri["price_display"] == "₹294"
    assert peri["stock"]["level"] == "low_stock"
    assert peri["stock"]["text"] == "Low Stock (3)"
    mint = by_name["Mint Makhana"]
    assert mint["price"] == 295
    assert mint["stock"]["available"] is False


def test_products_filter_by_category_and_search(client: TestClient, make_product):
    make_product(name="Classic Makhana", category="Makhana")
    make_product(name="Ragi Chips", category='{"name": "Chips"}')
    r = client.get("/api/products", params={"category": "chips"})
    assert [p["name"] for p in r.json()] == ["Ragi Chips"]
    assert r.json()[0]["category"] == "Chips"
    r = client.get("/api/products", params={"q": "classic"})
    assert [p["name"] for p in r.json()] == ["Classic Makhana"]


def test_product_detail_parses_details(client: TestClient, make_product):
    pid = make_product(details=json.dumps({"weight": "80g"}))
    r = client.get(f"/api/products/{pid}")
    assert r.status_code == 200
    assert r.json()["details"] == {"weight": "80g"}


def test_product_not_found(client: TestClient):
    assert client.get("/api/products/424242").status_code == 404


def test_recommendations_prefer_hand_picked_then_category(client: TestClient, make_product):
    a = make_product(name="A", category="Makhana")
    b = make_product(name="B", category="Makhana")
    c = make_product(name="C", category="Makhana", stock=0)
    d = make_product(name="D", category="Chips")
    main = make_product(name="Main", category="Makhana", recommended_product_ids=json.dumps([d]))
    r = client.get(f"/api/products/{main}/recommendations")
    assert r.status_code == 200
    names = [p["name"] for p in r.json()]
    assert names[0] == "D"
    assert "A" in names and "B" in names
    assert "C" not in names  # out of stock
    assert "Main" not in names
    assert a and b and c


def test_offers_exclude_expired(client: TestClient):
    now = datetime.utcnow()
    with Session(engine) as s:
        s.add(MarketingOffer(title="Diwali Box", expires_at=now + timedelta(days=3), created_at=now - timedelta(hours=1)))
        s.add(MarketingOffer(title="Holi Sale", expires_at=now - timedelta(days=1)))
        s.add(MarketingOffer(title="Monsoon Combo", expires_at=now + timedelta(days=10), created_at=now))
        s.commit()
    r = client.get("/api/offers")
    assert r.status_code == 200
    assert [o["title"] for o in r.json()] == ["Monsoon Combo", "Diwali Box"]
    assert len(client.get("/api/offers", params={"limit": 1}).json()) == 1


def test_contact_form_stores_message(client: TestClient):
    r = client.post(
        "/api/contact",
        json={
            "name": "Ravi",
            "email": "Ravi@Example.com",
            "subject": "Bulk order",
            "message": "Need 200 boxes for an event.",
        },
    )
    assert r.status_code == 201
    with Session(engine) as s:
        msg = s.exec(select(ContactMessage)).one()
        assert msg.email == "ravi@example.com"
        assert msg.responded is False


def test_contact_form_validation(client: TestClient):
    for bad in ("no-at-sign", "abc@", "ravi@example"):
        r = client.post("/api/contact", json={"name": "Ravi", "email": bad, "subject": "x", "message": "y"})
        assert r.status_code == 422
        assert r.json()["error"].startswith("email:")
    with Session(engine) as s:
        assert s.exec(select(ContactMessage)).all() == []
    r = client.post("/api/contact", json={"name": "Ravi"})
    assert r.status_code == 422
