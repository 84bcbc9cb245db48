from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class StockInfo(BaseModel):
    level: str
    text: str
    available: bool
    message: str
    count: int


class ProductOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: int | float
    price_display: str
    image_url: str | None = None
    category: str | None = None
    stock: StockInfo
    nutritional_info: str | None = None
    details: dict | list | None = None
    recommended_product_ids: list[int] | None = None


class OfferOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    image_url: str | None = None
    expires_at: datetime
    created_at: datetime


class CouponCheckResponse(BaseModel):
    valid: bool
    code: str
    discount_percent: int = 0
    discount: int = 0
    total_after_discount: int = 0
    message: str


class ContactCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=30)
    subject: str = Field(min_length=1, max_length=300)
    message: str = Field(min_length=1, max_length=5000)
