"""Shiprocket admin: connection check, tracking, payment links."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from naturalpuff.api.shipping import shiprocket_http_error
from naturalpuff.core.config import is_shiprocket_configured
from naturalpuff.core.database import get_db
from naturalpuff.models import Order
from naturalpuff.schemas import PaymentLinkRequest
from naturalpuff.services import shiprocket

router = APIRouter()


@router.get("/status")
def shiprocket_status():
    return {"configured": is_shiprocket_configured()}


@router.post("/token")
def shiprocket_token(force_refresh: bool = False):
    """Logs in (or reuses the cached token); only reports success, never the token itself."""
    try:
        shiprocket.get_token(force_refresh=force_refresh)
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)
    return {"success": True, "message": "Authenticated with Shiprocket"}


@router.get("/track/{shipment_id}")
def shiprocket_track(shipment_id: str):
    try:
        return shiprocket.track_shipment(shipment_id)
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)


@router.post("/payment-link")
def shiprocket_payment_link(body: PaymentLinkRequest, db: Session = Depends(get_db)):
    order = db.get(Order, body.order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    try:
        return shiprocket.generate_payment_link(
            order_id=order.id,
            amount=order.total_amount,
            purpose=body.purpose,
            customer_name=order.customer_name,
            customer_email=order.customer_email or "",
            customer_phone=order.customer_phone or "",
        )
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)
