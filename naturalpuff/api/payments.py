"""
Razorpay: order proxy, checkout verification, webhook, status reconciliation.
Only verified signatures (checkout HMAC or webhook HMAC) or the gateway's own payment record move an order to paid.
"""
import json
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlmodel import Session

from naturalpuff.core.config import settings
from naturalpuff.core.database import get_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.models import Order
from naturalpuff.schemas import PaymentStatusRequest, PaymentVerifyRequest, PaymentVerifyResponse, RazorpayOrderRequest
from naturalpuff.services import razorpay
from naturalpuff.services.orders import (
    find_by_gateway_order,
    mark_order_failed,
    mark_order_paid,
    reconcile_payment_status,
)

router = APIRouter(prefix="/api/payments/razorpay", tags=["payments"])
log = logging.getLogger("naturalpuff.payments")

_PAYMENT_LIMIT = f"{settings.rate_limit_payment_per_minute}/minute"


@router.post("/order")
@limiter.limit(_PAYMENT_LIMIT)
def create_razorpay_order(request: Request, body: RazorpayOrderRequest):
    """Server-side proxy so the key secret never reaches the browser. amount is in paise."""
    if not body.amount:
        raise HTTPException(status_code=400, detail="Amount is required")
    try:
        order = razorpay.create_order(
            amount=body.amount,
            currency=body.currency or settings.razorpay_currency,
            receipt=body.receipt,
            notes=body.notes,
        )
    except razorpay.RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    except razorpay.RazorpayError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return {"data": order}


@router.post("/verify", response_model=PaymentVerifyResponse)
@limiter.limit(_PAYMENT_LIMIT)
def verify_payment(request: Request, body: PaymentVerifyRequest, db: Session = Depends(get_db)):
    if not (body.razorpay_payment_id and body.razorpay_order_id and body.razorpay_signature):
        raise HTTPException(status_code=400, detail="Missing required payment verification parameters")
    try:
        valid = razorpay.verify_payment_signature(
            body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature
        )
    except razorpay.RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    if not valid:
        log.warning("Invalid payment signature: razorpay_order_id=%s", body.razorpay_order_id)
        raise HTTPException(status_code=400, detail="Payment validation failed: Invalid signature")

    order = find_by_gateway_order(db, body.razorpay_order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    transitioned = mark_order_paid(db, order, body.razorpay_payment_id)
    return PaymentVerifyResponse(
        success=True,
        message="Payment verified successfully" if transitioned else "Payment already verified",
        order_id=order.id,
    )


def _webhook_order(db: Session, entity: dict) -> Order | None:
    notes = entity.get("notes") or {}
    if isinstance(notes, dict) and notes.get("order_id"):
        order = db.get(Order, str(notes["order_id"]))
        if order:
            return order
    gateway_order_id = entity.get("order_id") or (entity.get("id") if str(entity.get("id", "")).startswith("order_") else None)
    if gateway_order_id:
        return find_by_gateway_order(db, gateway_order_id)
    return None


@router.post("/webhook")
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(None, alias="X-Razorpay-Signature"),
    db: Session = Depends(get_db),
):
    raw = await request.body()
    try:
        valid = razorpay.verify_webhook_signature(raw, x_razorpay_signature or "")
    except razorpay.RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    if not valid:
        log.warning("Webhook signature mismatch")
        raise HTTPException(status_code=400, detail="Invalid signature")
    try:
        event = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    name = str(event.get("event") or "")
    payload = event.get("payload") or {}
    payment = (payload.get("payment") or {}).get("entity") or {}
    gateway_order = (payload.get("order") or {}).get("entity") or {}
    log.info("Razorpay webhook: event=%s", name)

    if name in ("payment.captured", "order.paid"):
        order = _webhook_order(db, payment) or _webhook_order(db, gateway_order)
        if not order:
            log.warning("Webhook %s for unknown order", name)
            return {"status": "ignored", "reason": "order not found"}
        mark_order_paid(db, order, payment.get("id"))
        return {"status": "ok", "order_id": order.id}
    if name == "payment.failed":
        order = _webhook_order(db, payment)
        if not order:
            return {"status": "ignored", "reason": "order not found"}
        mark_order_failed(db, order, payment.get("id"))
        return {"status": "ok", "order_id": order.id}
    return {"status": "ignored", "event": name}


@router.post("/status")
@limiter.limit(_PAYMENT_LIMIT)
def payment_status(request: Request, body: PaymentStatusRequest, db: Session = Depends(get_db)):
    if not body.order_id:
        raise HTTPException(status_code=400, detail="Order ID is required")
    order = db.get(Order, body.order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    try:
        return reconcile_payment_status(db, order)
    except razorpay.RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    except razorpay.RazorpayError as e:
        raise HTTPException(status_code=502, detail=e.message)
