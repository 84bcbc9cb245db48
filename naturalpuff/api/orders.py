"""Checkout: place an order (online via Razorpay, or cash on delivery) and read it back."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from naturalpuff.api.deps import get_optional_user_id
from naturalpuff.core.config import settings
from naturalpuff.core.database import get_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.models import Order
from naturalpuff.schemas import OrderCreate, OrderItemOut, OrderOut, OrderPlaced
from naturalpuff.services.orders import CartLine, CheckoutData, OrderError, order_items, place_order, shipping_details
from naturalpuff.services.razorpay import RazorpayError, RazorpayNotConfigured

router = APIRouter(prefix="/api/orders", tags=["orders"])
log = logging.getLogger("naturalpuff.payments")

_PAYMENT_LIMIT = f"{settings.rate_limit_payment_per_minute}/minute"


def serialize_order(db: Session, order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        status=order.status,
        payment_method=order.payment_method,
        subtotal=order.subtotal,
        discount_amount=order.discount_amount,
        shipping_cost=order.shipping_cost,
        total_amount=order.total_amount,
        coupon_code=order.coupon_code,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        customer_phone=order.customer_phone,
        address=order.address,
        city=order.city,
        state=order.state,
        pincode=order.pincode,
        courier_name=order.courier_name,
        razorpay_order_id=order.razorpay_order_id,
        payment_id=order.payment_id,
        shipping_details=shipping_details(order),
        items=[
            OrderItemOut(product_id=i.product_id, product_name=i.product_name, quantity=i.quantity, price=i.price)
            for i in order_items(db, order.id)
        ],
        paid_at=order.paid_at,
        created_at=order.created_at,
    )


@router.post("", response_model=OrderPlaced, status_code=201)
@limiter.limit(_PAYMENT_LIMIT)
def create_order(
    request: Request,
    body: OrderCreate,
    user_id: int | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    data = CheckoutData(
        customer_name=body.customer_name,
        lines=[CartLine(product_id=i.product_id, quantity=i.quantity) for i in body.items],
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        address=body.address,
        city=body.city,
        state=body.state,
        pincode=body.pincode,
        coupon_code=body.coupon_code,
        payment_method=body.payment_method,
        shipping_cost=body.shipping_cost,
        courier_name=body.courier_name,
        user_id=user_id,
    )
    try:
        order, gateway_order = place_order(db, data)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except RazorpayNotConfigured as e:
        raise HTTPException(status_code=503, detail=e.message)
    except RazorpayError as e:
        raise HTTPException(status_code=502, detail=e.message)
    return OrderPlaced(
        order=serialize_order(db, order),
        razorpay_order=gateway_order,
        razorpay_key_id=settings.razorpay_key_id if gateway_order else None,
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize_order(db, order)
