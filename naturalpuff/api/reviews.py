"""Product reviews: public listing, verified-buyer submit, helpful votes."""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from naturalpuff.api.deps import get_current_user
from naturalpuff.core.config import settings
from naturalpuff.core.database import get_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.models import Product, ProductReview, User
from naturalpuff.schemas import ReviewCreate, ReviewEligibility, ReviewOut, ReviewSummary
from naturalpuff.services.reviews import (
    ReviewError,
    create_review,
    existing_review,
    product_reviews,
    purchase_order_id,
    serialize_review,
    vote_helpful,
)

router = APIRouter(prefix="/api", tags=["reviews"])

_REVIEW_LIMIT = f"{settings.rate_limit_per_minute}/minute"


def _get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/products/{product_id}/reviews", response_model=ReviewSummary)
def list_reviews(product_id: int, db: Session = Depends(get_db)):
    _get_product(db, product_id)
    reviews, average = product_reviews(db, product_id)
    return ReviewSummary(average_rating=average, total_reviews=len(reviews), reviews=reviews)


@router.get("/products/{product_id}/reviews/eligibility", response_model=ReviewEligibility)
def review_eligibility(
    product_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_product(db, product_id)
    if existing_review(db, user.id, product_id):
        return ReviewEligibility(can_review=False, already_reviewed=True, message="You have already reviewed this product")
    if not purchase_order_id(db, user.id, product_id):
        return ReviewEligibility(
            can_review=False,
            already_reviewed=False,
            message="Only customers who bought this product can review it",
        )
    return ReviewEligibility(can_review=True, already_reviewed=False, message="You can review this product")


@router.post("/products/{product_id}/reviews", response_model=ReviewOut, status_code=201)
@limiter.limit(_REVIEW_LIMIT)
def submit_review(
    request: Request,
    product_id: int,
    body: ReviewCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _get_product(db, product_id)
    try:
        review = create_review(db, user, product_id, body.rating, body.review_text)
    except ReviewError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return serialize_review(review, user)


@router.post("/reviews/{review_id}/helpful")
def mark_helpful(
    review_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = db.get(ProductReview, review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    try:
        count = vote_helpful(db, review, user.id)
    except ReviewError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, "helpful_count": count}
