"""Shiprocket external API: login token, serviceability, adhoc order, tracking, payment link."""
import logging
import time
from typing import NamedTuple

from naturalpuff.core.config import is_shiprocket_configured, settings
from naturalpuff.core.http import UpstreamUnavailable, request_json

log = logging.getLogger("naturalpuff.shiprocket")

# Shiprocket tokens live 24h; refresh an hour early
_TOKEN_TTL = 23 * 3600
_TOKEN_CACHE: dict[str, float | str] = {}


class ShiprocketError(Exception):
    def __init__(self, message: str, status_code: int | None = None, body: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body or {}


class ShiprocketNotConfigured(ShiprocketError):
    pass


class CourierOption(NamedTuple):
    courier_name: str
    courier_code: str
    rate: float
    etd: str
    serviceability_type: str  # "surface" | "air"


def clear_token_cache() -> None:
    _TOKEN_CACHE.clear()


def get_token(force_refresh: bool = False) -> str:
    """Bearer token from /auth/login; cached in-process for 23 hours."""
    now = time.time()
    if not force_refresh and _TOKEN_CACHE.get("token") and float(_TOKEN_CACHE.get("expires", 0)) > now:
        return str(_TOKEN_CACHE["token"])
    if not is_shiprocket_configured():
        raise ShiprocketNotConfigured("Shiprocket credentials are not configured")
    try:
        status, body = request_json(
            "POST",
            f"{settings.shiprocket_api_base}/auth/login",
            payload={"email": settings.shiprocket_email, "password": settings.shiprocket_password},
        )
    except UpstreamUnavailable as e:
        raise ShiprocketError(f"Shiprocket connection error: {e}") from e
    token = body.get("token") if 200 <= status < 300 else None
    if not token:
        log.error("Shiprocket authentication error: status=%s body=%s", status, body)
        raise ShiprocketError("Failed to authenticate with Shiprocket", status_code=status, body=body)
    _TOKEN_CACHE["token"] = token
    _TOKEN_CACHE["expires"] = now + _TOKEN_TTL
    return token


def _call(method: str, path: str, *, payload: dict | None = None, params: dict | None = None) -> dict:
    token = get_token()
    try:
        status, body = request_json(
            method,
            f"{settings.shiprocket_api_base}{path}",
            headers={"Authorization": f"Bearer {token}"},
            payload=payload,
            params=params,
        )
    except UpstreamUnavailable as e:
        raise ShiprocketError(f"Shiprocket connection error: {e}") from e
    if status == 401:
        # Token revoked on their side; one fresh login
        token = get_token(force_refresh=True)
        try:
            status, body = request_json(
                method,
                f"{settings.shiprocket_api_base}{path}",
                headers={"Authorization": f"Bearer {token}"},
                payload=payload,
                params=params,
            )
        except UpstreamUnavailable as e:
            raise ShiprocketError(f"Shiprocket connection error: {e}") from e
    if not 200 <= status < 300:
        message = str(body.get("message") or f"Shiprocket API error: {status}")
        log.error("Shiprocket %s %s failed: status=%s message=%s", method, path, status, message)
        raise ShiprocketError(message, status_code=status, body=body)
    return body


def check_serviceability(pickup_pincode: str, delivery_pincode: str, weight: float, cod: bool) -> list[CourierOption]:
    body = _call(
        "GET",
        "/courier/serviceability/",
        params={
            "pickup_postcode": pickup_pincode,
            "delivery_postcode": delivery_pincode,
            "weight": weight,
            "cod": 1 if cod else 0,
        },
    )
    companies = (body.get("data") or {}).get("available_courier_companies") or []
    options = []
    for c in companies:
        options.append(
            CourierOption(
                courier_name=str(c.get("courier_name") or ""),
                courier_code=str(c.get("courier_company_id") or ""),
                rate=float(c.get("rate") or 0),
                etd=str(c.get("etd") or ""),
                serviceability_type="surface" if c.get("is_surface") else "air",
            )
        )
    return options


def create_adhoc_order(order_payload: dict) -> dict:
    """POST /orders/create/adhoc. Returns {order_id, shipment_id, status, ...}."""
    body = _call("POST", "/orders/create/adhoc", payload=order_payload)
    if not body.get("order_id"):
        raise ShiprocketError(str(body.get("message") or "Shiprocket did not return an order id"), body=body)
    log.info("Shiprocket order created: channel_order=%s shiprocket_order=%s", order_payload.get("order_id"), body.get("order_id"))
    return body


def track_shipment(shipment_id: str) -> dict:
    return _call("GET", f"/courier/track/shipment/{shipment_id}")


def generate_payment_link(
    order_id: str,
    amount: int,
    purpose: str,
    customer_name: str,
    customer_email: str,
    customer_phone: str,
) -> dict:
    return _call(
        "POST",
        "/payments/generate-link",
        payload={
            "order_id": order_id,
            "amount": amount,
            "purpose": purpose,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "customer_phone": customer_phone,
        },
    )
