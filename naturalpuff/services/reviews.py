"""
Product reviews. Only a buyer can review: the user needs a settled order (paid or shipped)
containing the product, and gets one review per product.
"""
import logging

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from naturalpuff.models import Order, OrderItem, ProductReview, ReviewVote, User
from naturalpuff.schemas import ReviewOut
from naturalpuff.services.orders import SETTLED_STATUSES

log = logging.getLogger("naturalpuff.reviews")


class ReviewError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def reviewer_name(user: User | None) -> str:
    if not user:
        return "Anonymous User"
    return user.full_name or user.email.split("@")[0] or "Anonymous User"


def purchase_order_id(db: Session, user_id: int, product_id: int) -> str | None:
    """Newest settled order of the user that contains the product."""
    stmt = (
        select(Order.id)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .where(
            Order.user_id == user_id,
            Order.status.in_(SETTLED_STATUSES),
            OrderItem.product_id == product_id,
        )
        .order_by(Order.created_at.desc())
    )
    return db.exec(stmt).first()


def existing_review(db: Session, user_id: int, product_id: int) -> ProductReview | None:
    stmt = select(ProductReview).where(ProductReview.product_id == product_id, ProductReview.user_id == user_id)
    return db.exec(stmt).first()


def serialize_review(review: ProductReview, user: User | None) -> ReviewOut:
    return ReviewOut(
        id=review.id or 0,
        product_id=review.product_id,
        user_name=reviewer_name(user),
        rating=review.rating,
        review_text=review.review_text,
        verified_purchase=review.verified_purchase,
        helpful_count=review.helpful_count,
        created_at=review.created_at,
    )


def product_reviews(db: Session, product_id: int) -> tuple[list[ReviewOut], float]:
    """Newest first, with the average rating rounded to one decimal (0 without reviews)."""
    stmt = (
        select(ProductReview, User)
        .join(User, User.id == ProductReview.user_id, isouter=True)
        .where(ProductReview.product_id == product_id)
        .order_by(ProductReview.created_at.desc(), ProductReview.id.desc())
    )
    reviews = [serialize_review(review, user) for review, user in db.exec(stmt).all()]
    if not reviews:
        return [], 0.0
    return reviews, round(sum(r.rating for r in reviews) / len(reviews), 1)


def create_review(db: Session, user: User, product_id: int, rating: int, text: str) -> ProductReview:
    if existing_review(db, user.id, product_id):
        raise ReviewError("You have already reviewed this product", status_code=409)
    order_id = purchase_order_id(db, user.id, product_id)
    if not order_id:
        raise ReviewError("Only customers who bought this product can review it", status_code=403)
    review = ProductReview(
        product_id=product_id,
        user_id=user.id,
        order_id=order_id,
        rating=rating,
        review_text=text.strip(),
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent submit by the same user
        db.rollback()
        raise ReviewError("You have already reviewed this product", status_code=409)
    db.refresh(review)
    log.info("Review added: id=%s product_id=%s rating=%s", review.id, product_id, rating)
    return review


def vote_helpful(db: Session, review: ProductReview, user_id: int) -> int:
    """One vote per user and review; returns the new helpful count."""
    if review.user_id == user_id:
        raise ReviewError("You cannot vote on your own review")
    already = db.exec(
        select(func.count(ReviewVote.id)).where(ReviewVote.review_id == review.id, ReviewVote.user_id == user_id)
    ).one()
    if already:
        raise ReviewError("You have already marked this review as helpful", status_code=409)
    try:
        db.add(ReviewVote(review_id=review.id, user_id=user_id))
        db.execute(
            update(ProductReview)
            .where(ProductReview.id == review.id)
            .values(helpful_count=ProductReview.helpful_count + 1)
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ReviewError("You have already marked this review as helpful", status_code=409)
    db.refresh(review)
    return review.helpful_count
