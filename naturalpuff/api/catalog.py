"""Storefront: products, recommendations, offers, coupon check, contact form."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlmodel import Session

from naturalpuff.core.config import settings
from naturalpuff.core.database import get_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.models import ContactMessage, Product
from naturalpuff.schemas import ContactCreate, CouponCheckResponse, OfferOut, ProductOut
from naturalpuff.services.catalog import active_offers, list_products, recommendations, serialize_product
from naturalpuff.services.coupon import normalize_code, validate_coupon

router = APIRouter(prefix="/api", tags=["storefront"])
log = logging.getLogger("naturalpuff.catalog")

_CONTACT_LIMIT = f"{settings.rate_limit_per_minute}/minute"


@router.get("/products", response_model=list[ProductOut])
def get_products(
    category: str | None = None,
    q: str | None = Query(None, max_length=100),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return [serialize_product(p) for p in list_products(db, category=category, q=q, limit=limit)]


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(product)


@router.get("/products/{product_id}/recommendations", response_model=list[ProductOut])
def get_recommendations(
    product_id: int,
    limit: int = Query(4, ge=1, le=20),
    db: Session = Depends(get_db),
):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return [serialize_product(p) for p in recommendations(db, product, limit=limit)]


@router.get("/offers", response_model=list[OfferOut])
def get_offers(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    """Offers that have not expired yet, newest first."""
    return active_offers(db, limit=limit)


@router.get("/coupons/validate", response_model=CouponCheckResponse)
def check_coupon(
    code: str = Query("", max_length=64),
    subtotal: int = Query(..., ge=0),
    db: Session = Depends(get_db),
):
    discount, coupon, error = validate_coupon(db, code, subtotal)
    if error:
        return CouponCheckResponse(valid=False, code=normalize_code(code), message=error)
    return CouponCheckResponse(
        valid=True,
        code=coupon.code,
        discount_percent=coupon.discount_percent,
        discount=discount,
        total_after_discount=subtotal - discount,
        message=f"Coupon applied: {coupon.discount_percent}% off.",
    )


@router.post("/contact", status_code=201)
@limiter.limit(_CONTACT_LIMIT)
def submit_contact(request: Request, body: ContactCreate, db: Session = Depends(get_db)):
    msg = ContactMessage(
        name=body.name.strip(),
        email=body.email.strip().lower(),
        phone=(body.phone or "").strip() or None,
        subject=body.subject.strip(),
        message=body.message.strip(),
    )
    db.add(msg)
    db.commit()
    db.refresh(msg)
    log.info("Contact message received: id=%s", msg.id)
    return {"success": True, "id": msg.id, "message": "Thank you! We will get back to you soon."}
