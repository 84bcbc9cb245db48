"""Product reviews from verified buyers, and helpful votes on them."""
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ProductReview(SQLModel, table=True):
    __tablename__ = "product_reviews"
    __table_args__ = (UniqueConstraint("product_id", "user_id", name="uq_product_reviews_product_user"),)

    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(index=True)
    user_id: int = Field(index=True)
    order_id: str | None = Field(default=None, max_length=36)  # The settled order that made the user eligible
    rating: int  # 1..5
    review_text: str = ""
    verified_purchase: bool = True
    helpful_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ReviewVote(SQLModel, table=True):
    __tablename__ = "review_votes"
    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_review_votes_review_user"),)

    id: int | None = Field(default=None, primary_key=True)
    review_id: int = Field(foreign_key="product_reviews.id", index=True)
    user_id: int
    created_at: datetime = Field(default_factory=datetime.utcnow)
