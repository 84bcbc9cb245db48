"""Order notification e-mail (admin summary, optional customer confirmation)."""
import logging

from fastapi import APIRouter, HTTPException, Request

from naturalpuff.core.config import settings
from naturalpuff.core.rate_limit import limiter
from naturalpuff.schemas import OrderNotificationRequest
from naturalpuff.services.email_sender import (
    MailNotConfigured,
    invalid_order_fields,
    missing_order_fields,
    send_order_notification,
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
log = logging.getLogger("naturalpuff.email")

_NOTIFY_LIMIT = f"{settings.rate_limit_payment_per_minute}/minute"


@router.post("/order")
@limiter.limit(_NOTIFY_LIMIT)
def notify_order(request: Request, body: OrderNotificationRequest):
    payload = body.model_dump()
    missing = missing_order_fields(payload)
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")
    invalid = invalid_order_fields(payload)
    if invalid:
        raise HTTPException(status_code=400, detail=f"Invalid numeric fields: {', '.join(invalid)}")
    try:
        result = send_order_notification(payload)
    except MailNotConfigured as e:
        log.error("Order notification skipped: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    if not result["admin_sent"]:
        raise HTTPException(status_code=500, detail="Failed to send order notification")
    return {
        "success": True,
        "message": "Order notification sent",
        "customer_notified": bool(result["customer_sent"]),
    }
