from datetime import datetime

from pydantic import BaseModel, Field


class ProductIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: int = Field(ge=0)
    image_url: str | None = None
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    nutritional_info: str | None = None
    details: dict | list | None = None
    recommended_product_ids: list[int] | None = None


class ProductPatch(BaseModel):
    name: str | None = None
    description: str | None = None
    price: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    nutritional_info: str | None = None
    details: dict | list | None = None
    recommended_product_ids: list[int] | None = None


class CouponIn(BaseModel):
    code: str = Field(min_length=2, max_length=64)
    discount_percent: int = Field(ge=1, le=100)
    is_active: bool = True
    expires_at: datetime | None = None
    min_order_value: int | None = Field(default=None, ge=0)


class CouponPatch(BaseModel):
    discount_percent: int | None = Field(default=None, ge=1, le=100)
    is_active: bool | None = None
    expires_at: datetime | None = None
    min_order_value: int | None = Field(default=None, ge=0)


class OfferIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    image_url: str | None = None
    expires_at: datetime


class OrderStatusUpdate(BaseModel):
    status: str


class ContactUpdate(BaseModel):
    responded: bool | None = None
    notes: str | None = None
