"""
Razorpay REST API: order creation (Basic auth), payment signature and webhook HMAC checks,
payment lookup for status reconciliation.
"""
import base64
import hashlib
import hmac
import logging

from naturalpuff.core.config import is_razorpay_configured, settings
from naturalpuff.core.http import UpstreamUnavailable, request_json

log = logging.getLogger("naturalpuff.payments")


class RazorpayError(Exception):
    """Razorpay answered non-2xx, or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RazorpayNotConfigured(RazorpayError):
    pass


def _basic_auth_header() -> dict[str, str]:
    if not is_razorpay_configured():
        raise RazorpayNotConfigured("Razorpay credentials are not configured")
    raw = f"{settings.razorpay_key_id}:{settings.razorpay_key_secret}".encode()
    return {"Authorization": "Basic " + base64.b64encode(raw).decode()}


def _upstream_message(body: dict, default: str) -> str:
    error = body.get("error")
    if isinstance(error, dict) and error.get("description"):
        return str(error["description"])
    return default


def create_order(amount: int, currency: str = "INR", receipt: str = "", notes: dict | None = None) -> dict:
    """
    POST /orders. amount is in paise (smallest currency unit).
    Returns the gateway order object ({"id": "order_...", ...}).
    """
    headers = _basic_auth_header()
    payload = {
        "amount": amount,
        "currency": currency or settings.razorpay_currency,
        "receipt": receipt or "",
        "notes": notes or {},
    }
    try:
        status, body = request_json("POST", f"{settings.razorpay_api_base}/orders", headers=headers, payload=payload)
    except UpstreamUnavailable as e:
        log.error("Razorpay order creation unreachable: %s", e)
        raise RazorpayError(f"Razorpay connection error: {e}") from e
    if not 200 <= status < 300:
        message = _upstream_message(body, "Failed to create order")
        log.error("Razorpay order creation failed: status=%s message=%s", status, message)
        raise RazorpayError(message, status_code=status)
    log.info("Razorpay order created: id=%s amount=%s receipt=%s", body.get("id"), amount, receipt)
    return body


def list_payments(count: int = 10) -> list[dict]:
    """GET /payments?count=N, most recent first."""
    headers = _basic_auth_header()
    try:
        status, body = request_json(
            "GET", f"{settings.razorpay_api_base}/payments", headers=headers, params={"count": count}
        )
    except UpstreamUnavailable as e:
        raise RazorpayError(f"Razorpay connection error: {e}") from e
    if not 200 <= status < 300:
        raise RazorpayError(_upstream_message(body, f"Razorpay API error: {status}"), status_code=status)
    items = body.get("items") or []
    return [p for p in items if isinstance(p, dict)]


def find_payment_for_order(order_id: str, count: int = 10) -> dict | None:
    """Recent payment whose notes.order_id is our order id, if any."""
    for payment in list_payments(count):
        notes = payment.get("notes") or {}
        if isinstance(notes, dict) and notes.get("order_id") == order_id:
            return payment
    return None


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(razorpay_order_id: str, razorpay_payment_id: str, signature: str) -> bool:
    """Checkout handler signature: HMAC_SHA256(key_secret, "order_id|payment_id"), hex, case-insensitive."""
    if not settings.razorpay_key_secret:
        raise RazorpayNotConfigured("Razorpay key secret is not configured")
    expected = _hmac_hex(settings.razorpay_key_secret, f"{razorpay_order_id}|{razorpay_payment_id}".encode())
    return hmac.compare_digest(expected, (signature or "").strip().lower())


def verify_webhook_signature(raw_body: bytes, signature: str) -> bool:
    """X-Razorpay-Signature: HMAC_SHA256(webhook_secret, raw request body)."""
    if not settings.razorpay_webhook_secret:
        raise RazorpayNotConfigured("Razorpay webhook secret is not configured")
    expected = _hmac_hex(settings.razorpay_webhook_secret, raw_body)
    return hmac.compare_digest(expected, (signature or "").strip().lower())


def rupees_to_paise(amount: int | float) -> int:
    return int(round(float(amount) * 100))
