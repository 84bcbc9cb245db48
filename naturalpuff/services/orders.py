"""
Checkout: order placement, paid/failed transitions, gateway status reconciliation, Shiprocket hand-off.
Orders only become "paid" through mark_order_paid, a conditional UPDATE that at most one caller wins.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, select

from naturalpuff.core.config import settings
from naturalpuff.models import Order, OrderItem, Product
from naturalpuff.services import razorpay, shiprocket
from naturalpuff.services.coupon import normalize_code, validate_coupon
from naturalpuff.services.pricing import display_price

log = logging.getLogger("naturalpuff.payments")

PAID_PAYMENT_STATES = ("authorized", "captured")
# Statuses past payment; the paid transition never re-enters from these
SETTLED_STATUSES = ("paid", "shipped")


class OrderError(Exception):
    """Client-side problem with the cart (unknown product, stock, coupon)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class CartLine:
    product_id: int
    quantity: int


@dataclass
class CheckoutData:
    customer_name: str
    lines: list[CartLine]
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    coupon_code: str | None = None
    payment_method: str = "online"
    shipping_cost: int | None = None
    courier_name: str | None = None
    user_id: int | None = None
    notes: dict = field(default_factory=dict)


def _load_lines(db: Session, lines: list[CartLine]) -> list[tuple[Product, int]]:
    if not lines:
        raise OrderError("Cart is empty.")
    merged: dict[int, int] = {}
    for line in lines:
        if line.quantity < 1:
            raise OrderError("Quantity must be at least 1.")
        merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity
    products = db.exec(select(Product).where(Product.id.in_(list(merged)))).all()
    by_id = {p.id: p for p in products}
    out = []
    for product_id, qty in merged.items():
        product = by_id.get(product_id)
        if not product:
            raise OrderError(f"Product {product_id} not found.", status_code=404)
        if not product.stock or product.stock <= 0:
            raise OrderError(f"{product.name} is out of stock.")
        if qty > product.stock:
            raise OrderError(f"Only {product.stock} of {product.name} left in stock.")
        out.append((product, qty))
    return out


def place_order(db: Session, data: CheckoutData) -> tuple[Order, dict | None]:
    """
    Creates the order and its items. For online payment also creates the Razorpay order
    (amount in paise, notes.order_id = our id) and returns it as the second element.
    """
    if data.payment_method not in ("online", "cod"):
        raise OrderError("Invalid payment method.")
    priced = _load_lines(db, data.lines)
    subtotal = 0
    for product, qty in priced:
        subtotal += int(display_price(product.price)) * qty

    discount = 0
    coupon_code = None
    if normalize_code(data.coupon_code):
        discount, coupon, error = validate_coupon(db, data.coupon_code, subtotal)
        if error:
            raise OrderError(error)
        coupon_code = coupon.code

    shipping_cost = data.shipping_cost if data.shipping_cost is not None else settings.flat_shipping_cost
    if shipping_cost < 0:
        raise OrderError("Invalid shipping cost.")
    total = subtotal - discount + shipping_cost

    order = Order(
        user_id=data.user_id,
        total_amount=total,
        subtotal=subtotal,
        discount_amount=discount,
        shipping_cost=shipping_cost,
        payment_method=data.payment_method,
        customer_name=data.customer_name.strip(),
        customer_email=(data.customer_email or "").strip() or None,
        customer_phone=(data.customer_phone or "").strip() or None,
        address=data.address,
        city=data.city,
        state=data.state,
        pincode=data.pincode,
        coupon_code=coupon_code,
        courier_name=data.courier_name,
    )
    db.add(order)
    for product, qty in priced:
        db.add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                product_name=product.name,
                quantity=qty,
                price=int(display_price(product.price)),
            )
        )
    if data.payment_method == "cod":
        _decrement_stock(db, [(product.id, qty) for product, qty in priced])
    db.commit()
    db.refresh(order)
    log.info("Order placed: id=%s total=%s method=%s", order.id, total, order.payment_method)

    if data.payment_method == "cod":
        return order, None

    try:
        gateway_order = razorpay.create_order(
            amount=razorpay.rupees_to_paise(total),
            currency=settings.razorpay_currency,
            receipt=order.id[:40],
            notes={**(data.notes or {}), "order_id": order.id},
        )
    except razorpay.RazorpayError:
        # No gateway order to pay against; the cart has to be placed again
        mark_order_failed(db, order)
        raise
    order.razorpay_order_id = gateway_order.get("id")
    order.status = "created"
    order.updated_at = datetime.utcnow()
    db.add(order)
    db.commit()
    db.refresh(order)
    return order, gateway_order


def order_items(db: Session, order_id: str) -> list[OrderItem]:
    return list(db.exec(select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)).all())


def find_by_gateway_order(db: Session, razorpay_order_id: str) -> Order | None:
    return db.exec(select(Order).where(Order.razorpay_order_id == razorpay_order_id)).first()


def _decrement_stock(db: Session, lines: list[tuple[int, int]]) -> None:
    for product_id, qty in lines:
        product = db.get(Product, product_id)
        if product and product.stock:
            product.stock = max(product.stock - qty, 0)
            product.updated_at = datetime.utcnow()
            db.add(product)


def mark_order_paid(db: Session, order: Order, payment_id: str | None) -> bool:
    """
    Moves the order to "paid" once in its lifetime: paid_at is still empty and the order has not
    moved past payment. Returns True only for the call that made the transition; stock is
    decremented by that call (COD orders already gave theirs up at placement).
    """
    now = datetime.utcnow()
    result = db.execute(
        update(Order)
        .where(Order.id == order.id, Order.paid_at.is_(None), Order.status.not_in(SETTLED_STATUSES))
        .values(status="paid", payment_id=payment_id, paid_at=now, updated_at=now)
    )
    transitioned = result.rowcount == 1
    if transitioned and order.payment_method != "cod":
        _decrement_stock(db, [(i.product_id, i.quantity) for i in order_items(db, order.id)])
    db.commit()
    db.refresh(order)
    if transitioned:
        log.info("Order paid: id=%s payment_id=%s", order.id, payment_id)
    else:
        log.info("Order already paid: id=%s status=%s", order.id, order.status)
    return transitioned


def mark_order_failed(db: Session, order: Order, payment_id: str | None = None) -> bool:
    """Failed only from a non-final state; a paid or shipped order never goes back."""
    now = datetime.utcnow()
    result = db.execute(
        update(Order)
        .where(
            Order.id == order.id,
            Order.paid_at.is_(None),
            Order.status.not_in(SETTLED_STATUSES + ("failed", "cancelled")),
        )
        .values(status="failed", payment_id=payment_id or order.payment_id, updated_at=now)
    )
    db.commit()
    db.refresh(order)
    if result.rowcount == 1:
        log.warning("Order payment failed: id=%s payment_id=%s", order.id, payment_id)
        return True
    return False


def reconcile_payment_status(db: Session, order: Order) -> dict:
    """
    Asks Razorpay for recent payments and settles the order from the one tagged with our id.
    Returns {"status": "paid" | "success" | "failed" | "pending", ...}.
    """
    if order.paid_at or order.status in SETTLED_STATUSES:
        return {"status": "paid", "order_id": order.id, "payment_id": order.payment_id}
    payment = razorpay.find_payment_for_order(order.id)
    if not payment:
        return {"status": "pending", "order_id": order.id, "message": "No payment found for this order yet"}
    state = str(payment.get("status") or "")
    payment_id = payment.get("id")
    if state in PAID_PAYMENT_STATES:
        mark_order_paid(db, order, payment_id)
        return {"status": "success", "order_id": order.id, "payment_id": payment_id}
    if state == "failed":
        mark_order_failed(db, order, payment_id)
        return {"status": "failed", "order_id": order.id, "payment_id": payment_id}
    return {"status": "pending", "order_id": order.id, "payment_id": payment_id, "payment_status": state}


def shipping_details(order: Order) -> dict:
    if not order.shipping_details:
        return {}
    try:
        parsed = json.loads(order.shipping_details)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _shiprocket_payload(db: Session, order: Order, weight: float, length: float, breadth: float, height: float) -> dict:
    name = (order.customer_name or "").strip()
    first, _, last = name.partition(" ")
    return {
        "order_id": order.id,
        "order_date": order.created_at.strftime("%Y-%m-%d %H:%M"),
        "pickup_location": settings.shiprocket_pickup_location,
        "billing_customer_name": first or name,
        "billing_last_name": last,
        "billing_address": order.address or "",
        "billing_city": order.city or "",
        "billing_pincode": order.pincode or "",
        "billing_state": order.state or "",
        "billing_country": "India",
        "billing_email": order.customer_email or "",
        "billing_phone": order.customer_phone or "",
        "shipping_is_billing": True,
        "order_items": [
            {
                "name": item.product_name,
                "sku": f"NP-{item.product_id}",
                "units": item.quantity,
                "selling_price": item.price,
            }
            for item in order_items(db, order.id)
        ],
        "payment_method": "COD" if order.payment_method == "cod" else "Prepaid",
        "shipping_charges": order.shipping_cost,
        "total_discount": order.discount_amount,
        "sub_total": order.subtotal,
        "length": length,
        "breadth": breadth,
        "height": height,
        "weight": weight,
    }


def ship_order(
    db: Session,
    order: Order,
    weight: float = 0.5,
    length: float = 10,
    breadth: float = 10,
    height: float = 10,
) -> dict:
    """Creates the Shiprocket order and stores its ids on shipping_details."""
    if order.payment_method != "cod" and order.status != "paid":
        raise OrderError("Only paid or cash-on-delivery orders can be shipped.")
    body = shiprocket.create_adhoc_order(_shiprocket_payload(db, order, weight, length, breadth, height))
    details = shipping_details(order)
    details.update(
        {
            "shiprocket_order_id": body.get("order_id"),
            "shiprocket_shipment_id": body.get("shipment_id"),
            "awb_code": body.get("awb_code") or None,
            "tracking_url": body.get("tracking_url") or None,
        }
    )
    order.shipping_details = json.dumps(details)
    if body.get("courier_name"):
        order.courier_name = body["courier_name"]
    order.updated_at = datetime.utcnow()
    db.add(order)
    db.commit()
    db.refresh(order)
    return details
