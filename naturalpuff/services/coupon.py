"""Coupon validation and discount calculation."""
from datetime import datetime

from sqlmodel import Session, select

from naturalpuff.models import Coupon


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def find_coupon(db: Session, code: str | None) -> Coupon | None:
    code_upper = normalize_code(code)
    if not code_upper:
        return None
    return db.exec(select(Coupon).where(Coupon.code == code_upper)).first()


def validate_coupon(
    db: Session,
    code: str | None,
    subtotal: int,
    now: datetime | None = None,
) -> tuple[int, Coupon | None, str | None]:
    """
    Checks the coupon against the cart subtotal (rupees).
    Returns (discount, coupon, error). error is None when the coupon applies.
    """
    if not normalize_code(code):
        return 0, None, "No coupon code entered."
    coupon = find_coupon(db, code)
    if not coupon:
        return 0, None, "Invalid coupon code."
    if not coupon.is_active:
        return 0, coupon, "This coupon is no longer active."

    now = now or datetime.utcnow()
    if coupon.expires_at and coupon.expires_at <= now:
        return 0, coupon, "This coupon has expired."

    if coupon.min_order_value is not None and subtotal < coupon.min_order_value:
        return 0, coupon, f"Minimum order value for this coupon is ₹{coupon.min_order_value}."

    if not (1 <= coupon.discount_percent <= 100):
        return 0, coupon, "Invalid discount percentage."

    discount = calculate_discount(subtotal, coupon.discount_percent)
    return discount, coupon, None


def calculate_discount(subtotal: int, percent: int) -> int:
    """Whole rupees, half rounds up; never more than the subtotal."""
    if subtotal <= 0 or percent <= 0:
        return 0
    discount = (subtotal * percent + 50) // 100
    return min(discount, subtotal)
