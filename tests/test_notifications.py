"""Order notification e-mail: required fields, admin + customer delivery, SMTP failures."""
import smtplib

import pytest
from fastapi.testclient import TestClient

from naturalpuff.core.config import settings
from naturalpuff.services import email_sender

ORDER = {
    "orderId": "NP-1001",
    "customerName": "Asha Verma",
    "amount": 1598,
    "email": "asha@example.com",
    "phone": "9876543210",
    "items": [{"name": "Peri Peri Makhana", "quantity": 2, "price": 799}],
}


class FakeSMTP:
    """Records messages instead of talking to a server; `fail_for` recipients raise."""

    sent: list[tuple[str, list[str], str]] = []
    fail_for: set[str] = set()

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def sendmail(self, from_addr, to_addrs, msg):
        if set(to_addrs) & self.fail_for:
            raise smtplib.SMTPRecipientsRefused({to_addrs[0]: (550, b"rejected")})
        FakeSMTP.sent.append((from_addr, list(to_addrs), msg))


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.fail_for = set()
    monkeypatch.setattr(email_sender.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_missing_fields(client: TestClient, smtp):
    r = client.post("/api/notifications/order", json={"customerName": "Asha", "amount": ""})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: orderId, amount"
    assert smtp.sent == []


def test_admin_and_customer_notified(client: TestClient, smtp):
    r = client.post("/api/notifications/order", json=ORDER)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Order notification sent", "customer_notified": True}
    recipients = [to for _, to, _ in smtp.sent]
    assert recipients == [["admin@test.local"], ["asha@example.com"]]


def test_customer_failure_does_not_fail_request(client: TestClient, smtp):
    smtp.fail_for = {"asha@example.com"}
    r = client.post("/api/notifications/order", json=ORDER)
    assert r.status_code == 200
    assert r.json()["customer_notified"] is False


def test_admin_failure(client: TestClient, smtp):
    smtp.fail_for = {"admin@test.local"}
    r = client.post("/api/notifications/order", json=ORDER)
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to send order notification"


def test_without_customer_email(client: TestClient, smtp):
    body = {k: v for k, v in ORDER.items() if k != "email"}
    r = client.post("/api/notifications/order", json=body)
    assert r.status_code == 200
    assert r.json()["customer_notified"] is False
    assert len(smtp.sent) == 1


def test_mail_not_configured(client: TestClient, smtp, monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "")
    r = client.post("/api/notifications/order", json=ORDER)
    assert r.status_code == 500
    assert r.json()["error"] == "Email credentials are not configured"
    assert smtp.sent == []


def test_notification_html_escapes_customer_values():
    subject, body = email_sender.build_order_notification_html(
        {"orderId": "NP-7", "customerName": "<script>alert(1)</script>", "amount": 123456, "items": [{"name": "A & B"}]}
    )
    assert subject == "New Order #NP-7 - ₹1,23,456"
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "A &amp; B" in body
    assert "Not provided" in body


@pytest.mark.parametrize(
    "changes, fields",
    [
        ({"amount": "abc"}, "amount"),
        ({"amount": -10}, "amount"),
        ({"items": [{"name": "Makhana", "quantity": "two", "price": 299}]}, "items[0].quantity"),
        ({"items": [{"name": "Makhana", "quantity": 1, "price": "free"}]}, "items[0].price"),
    ],
)
def test_non_numeric_values_rejected(client: TestClient, smtp, changes, fields):
    r = client.post("/api/notifications/order", json={**ORDER, **changes})
    assert r.status_code == 400
    assert r.json()["error"] == f"Invalid numeric fields: {fields}"
    assert smtp.sent == []


def test_invalid_customer_email(client: TestClient, smtp):
    r = client.post("/api/notifications/order", json={**ORDER, "email": "asha@"})
    assert r.status_code == 422
    assert smtp.sent == []
