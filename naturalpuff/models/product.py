from datetime import datetime

from sqlmodel import Field, SQLModel


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=200)
    description: str | None = None
    price: int  # Rupees. Legacy rows may be stored 10x, see services/pricing.py
    image_url: str | None = None
    stock: int | None = None  # None and 0 both mean out of stock
    category: str | None = Field(default=None, index=True, max_length=100)
    nutritional_info: str | None = None
    details: str | None = None  # Free-form JSON text (variants, sizes)
    recommended_product_ids: str | None = None  # JSON list of product ids
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
