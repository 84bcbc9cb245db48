from datetime import datetime

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    review_text: str = Field(default="", max_length=2000)


class ReviewOut(BaseModel):
    id: int
    product_id: int
    user_name: str
    rating: int
    review_text: str
    verified_purchase: bool
    helpful_count: int
    created_at: datetime


class ReviewSummary(BaseModel):
    average_rating: float
    total_reviews: int
    reviews: list[ReviewOut]


class ReviewEligibility(BaseModel):
    can_review: bool
    already_reviewed: bool
    message: str
