"""Coupon management: percentage codes, expiry, minimum order value."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import Coupon
from naturalpuff.schemas import CouponIn, CouponPatch
from naturalpuff.services.coupon import find_coupon, normalize_code

router = APIRouter()


@router.get("")
def coupons_list(db: Session = Depends(get_db)):
    return db.exec(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc())).all()


@router.post("", status_code=201)
def coupon_create(body: CouponIn, db: Session = Depends(get_db)):
    code = normalize_code(body.code)
    if find_coupon(db, code):
        raise HTTPException(status_code=400, detail="This coupon code already exists.")
    coupon = Coupon(
        code=code,
        discount_percent=body.discount_percent,
        is_active=body.is_active,
        expires_at=body.expires_at,
        min_order_value=body.min_order_value,
    )
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.patch("/{coupon_id}")
def coupon_update(coupon_id: int, body: CouponPatch, db: Session = Depends(get_db)):
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found.")
    for name, value in body.model_dump(exclude_unset=True).items():
        setattr(coupon, name, value)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


@router.delete("/{coupon_id}")
def coupon_delete(coupon_id: int, db: Session = Depends(get_db)):
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found.")
    db.delete(coupon)
    db.commit()
    return {"success": True}
