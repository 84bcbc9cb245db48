from datetime import datetime

from sqlmodel import Field, SQLModel


class MarketingOffer(SQLModel, table=True):
    __tablename__ = "marketing_offers"

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    description: str = ""
    image_url: str = ""
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
