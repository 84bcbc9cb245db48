"""Discount coupon: percentage off the subtotal, optional expiry and minimum order value."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class Coupon(SQLModel, table=True):
    __tablename__ = "coupons"

    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=64)  # Stored upper case, e.g. PUFF10
    discount_percent: int  # 1-100
    is_active: bool = True
    expires_at: datetime | None = None  # None = never expires
    min_order_value: int | None = None  # Rupees; None = no minimum
    created_at: datetime = Field(default_factory=datetime.utcnow)
