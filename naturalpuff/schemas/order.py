from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class CartLineIn(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, le=100)


class OrderCreate(BaseModel):
    items: list[CartLineIn] = Field(min_length=1)
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: EmailStr | None = None
    customer_phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    pincode: str | None = Field(default=None, max_length=10)
    coupon_code: str | None = None
    payment_method: Literal["online", "cod"] = "online"
    shipping_cost: int | None = Field(default=None, ge=0)
    courier_name: str | None = None


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: int


class OrderOut(BaseModel):
    id: str
    status: str
    payment_method: str
    subtotal: int
    discount_amount: int
    shipping_cost: int
    total_amount: int
    coupon_code: str | None = None
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    courier_name: str | None = None
    razorpay_order_id: str | None = None
    payment_id: str | None = None
    shipping_details: dict = {}
    items: list[OrderItemOut] = []
    paid_at: datetime | None = None
    created_at: datetime


class OrderPlaced(BaseModel):
    order: OrderOut
    razorpay_order: dict | None = None
    razorpay_key_id: str | None = None
