"""Product management. Prices are stored as entered (whole rupees)."""
import json
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import OrderItem, Product
from naturalpuff.schemas import ProductIn, ProductPatch
from naturalpuff.services.pricing import stock_status

router = APIRouter()

_JSON_COLUMNS = ("details", "recommended_product_ids")


def _row(product: Product) -> dict:
    out = product.model_dump()
    out["stock_status"] = stock_status(product.stock).level
    return out


def _apply(product: Product, values: dict) -> None:
    for name, value in values.items():
        if name in _JSON_COLUMNS:
            value = json.dumps(value) if value is not None else None
        elif name == "name":
            value = value.strip()
        elif isinstance(value, str):
            value = value.strip() or None
        setattr(product, name, value)


@router.get("")
def products_list(db: Session = Depends(get_db)):
    return [_row(p) for p in db.exec(select(Product).order_by(Product.id.desc())).all()]


@router.post("", status_code=201)
def product_create(body: ProductIn, db: Session = Depends(get_db)):
    product = Product(name=body.name.strip(), price=body.price)
    _apply(product, body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return _row(product)


@router.patch("/{product_id}")
def product_update(product_id: int, body: ProductPatch, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found.")
    values = body.model_dump(exclude_unset=True)
    if "name" in values and not (values["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Product name cannot be empty.")
    _apply(product, values)
    product.updated_at = datetime.utcnow()
    db.add(product)
    db.commit()
    db.refresh(product)
    return _row(product)


@router.delete("/{product_id}")
def product_delete(product_id: int, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found.")
    if db.exec(select(OrderItem).where(OrderItem.product_id == product_id)).first():
        raise HTTPException(status_code=409, detail="Product has orders; set its stock to 0 instead.")
    db.delete(product)
    db.commit()
    return {"success": True}
