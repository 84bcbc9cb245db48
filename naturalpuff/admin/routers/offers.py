from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import MarketingOffer
from naturalpuff.schemas import OfferIn

router = APIRouter()


@router.get("")
def offers_list(db: Session = Depends(get_db)):
    """All offers, expired ones included."""
    return db.exec(select(MarketingOffer).order_by(MarketingOffer.created_at.desc(), MarketingOffer.id.desc())).all()


@router.post("", status_code=201)
def offer_create(body: OfferIn, db: Session = Depends(get_db)):
    offer = MarketingOffer(
        title=body.title.strip(),
        description=(body.description or "").strip(),
        image_url=(body.image_url or "").strip(),
        expires_at=body.expires_at,
    )
    db.add(offer)
    db.commit()
    db.refresh(offer)
    return offer


@router.put("/{offer_id}")
def offer_update(offer_id: int, body: OfferIn, db: Session = Depends(get_db)):
    offer = db.get(MarketingOffer, offer_id)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found.")
    offer.title = body.title.strip()
    offer.description = (body.description or "").strip()
    offer.image_url = (body.image_url or "").strip()
    offer.expires_at = body.expires_at
    db.add(offer)
    db.commit()
    db.refresh(offer)
    return offer


@router.delete("/{offer_id}")
def offer_delete(offer_id: int, db: Session = Depends(get_db)):
    offer = db.get(MarketingOffer, offer_id)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found.")
    db.delete(offer)
    db.commit()
    return {"success": True}
