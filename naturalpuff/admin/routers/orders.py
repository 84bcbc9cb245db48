"""Order management: list/filter, detail, status changes, Shiprocket hand-off, payment reconciliation."""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from naturalpuff.api.orders import serialize_order
from naturalpuff.api.shipping import shiprocket_http_error
from naturalpuff.core.database import get_db
from naturalpuff.models import ORDER_STATUSES, Order
from naturalpuff.schemas import OrderStatusUpdate, ShipOrderRequest
from naturalpuff.services import razorpay, shiprocket
from naturalpuff.services.orders import OrderError, mark_order_paid, reconcile_payment_status, ship_order

router = APIRouter()
log = logging.getLogger("naturalpuff.admin")


@router.get("")
def orders_list(
    status_filter: str | None = Query(None, alias="status"),
    q: str | None = Query(None, max_length=100),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
    if status_filter:
        if status_filter not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status filter.")
        stmt = stmt.where(Order.status == status_filter)
    if q:
        like = f"%{q.strip()}%"
        stmt = stmt.where(
            Order.customer_name.ilike(like) | Order.customer_email.ilike(like) | Order.id.ilike(like)
        )
    return [
        {
            "id": o.id,
            "customer_name": o.customer_name,
            "customer_email": o.customer_email,
            "total_amount": o.total_amount,
            "status": o.status,
            "payment_method": o.payment_method,
            "created_at": o.created_at,
        }
        for o in db.exec(stmt).all()
    ]


def _get_order(db: Session, order_id: str) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/{order_id}")
def order_detail(order_id: str, db: Session = Depends(get_db)):
    return serialize_order(db, _get_order(db, order_id))


@router.patch("/{order_id}/status")
def order_status_update(order_id: str, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    """Manual status change. "paid" goes through the same conditional transition as verification."""
    order = _get_order(db, order_id)
    if body.status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail=f"Status must be one of: {', '.join(ORDER_STATUSES)}")
    if body.status == "paid":
        mark_order_paid(db, order, order.payment_id)
    else:
        if order.paid_at and body.status in ("pending", "created", "failed"):
            raise HTTPException(status_code=409, detail="A paid order cannot go back to an unpaid status.")
        order.status = body.status
        order.updated_at = datetime.utcnow()
        db.add(order)
        db.commit()
        db.refresh(order)
    log.info("Order status set: id=%s status=%s", order.id, order.status)
    return serialize_order(db, order)


@router.post("/{order_id}/ship")
def order_ship(order_id: str, body: ShipOrderRequest, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    try:
        details = ship_order(db, order, body.weight, body.length, body.breadth, body.height)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except shiprocket.ShiprocketError as e:
        raise shiprocket_http_error(e)
    return {"success": True, "order_id": order.id, "shipping_details": details}


@router.post("/{order_id}/check-payment")
def order_check_payment(order_id: str, db: Session = Depends(get_db)):
    order = _get_order(db, order_id)
    try:
        return reconcile_payment_status(db, order)
    except razorpay.RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    except razorpay.RazorpayError as e:
        raise HTTPException(status_code=502, detail=e.message)
