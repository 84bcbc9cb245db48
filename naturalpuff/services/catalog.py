"""Storefront reads: product serialisation, recommendations, live offers."""
import json
import logging
from datetime import datetime

from sqlmodel import Session, select

from naturalpuff.models import MarketingOffer, Product
from naturalpuff.schemas import OfferOut, ProductOut, StockInfo
from naturalpuff.services.pricing import display_price, format_inr, stock_status

log = logging.getLogger("naturalpuff.catalog")


def _json_field(raw: str | None):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        log.warning("Unparseable JSON column value: %.60s", raw)
        return None


def category_name(raw: str | None) -> str:
    """Category is either plain text or a JSON object with a name."""
    parsed = _json_field(raw) if raw and raw.lstrip().startswith("{") else None
    if isinstance(parsed, dict):
        return str(parsed.get("name") or "General")
    return raw or "General"


def recommended_ids(product: Product) -> list[int]:
    parsed = _json_field(product.recommended_product_ids)
    if not isinstance(parsed, list):
        return []
    return [int(i) for i in parsed if str(i).isdigit()]


def serialize_product(product: Product) -> ProductOut:
    price = display_price(product.price)
    details = _json_field(product.details)
    status = stock_status(product.stock)
    return ProductOut(
        id=product.id or 0,
        name=product.name,
        description=product.description,
        price=price,
        price_display=format_inr(price),
        image_url=product.image_url,
        category=category_name(product.category),
        stock=StockInfo(**status._asdict()),
        nutritional_info=product.nutritional_info,
        details=details if isinstance(details, (dict, list)) else None,
        recommended_product_ids=recommended_ids(product) or None,
    )


def list_products(db: Session, category: str | None = None, q: str | None = None, limit: int = 100) -> list[Product]:
    stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
    if q:
        stmt = stmt.where(Product.name.ilike(f"%{q.strip()}%"))
    products = list(db.exec(stmt).all())
    if category:
        wanted = category.strip().lower()
        products = [p for p in products if category_name(p.category).lower() == wanted]
    return products[:limit]


def recommendations(db: Session, product: Product, limit: int = 4) -> list[Product]:
    """Hand-picked ids first (in their order), then same-category products; never the product itself."""
    picked: list[Product] = []
    ids = [i for i in recommended_ids(product) if i != product.id]
    if ids:
        by_id = {p.id: p for p in db.exec(select(Product).where(Product.id.in_(ids))).all()}
        picked = [by_id[i] for i in ids if i in by_id]
    if len(picked) < limit:
        seen = {p.id for p in picked} | {product.id}
        own_category = category_name(product.category).lower()
        for p in db.exec(select(Product).order_by(Product.id)).all():
            if len(picked) >= limit:
                break
            if p.id in seen or category_name(p.category).lower() != own_category:
                continue
            if not stock_status(p.stock).available:
                continue
            picked.append(p)
    return picked[:limit]


def active_offers(db: Session, limit: int = 10, now: datetime | None = None) -> list[OfferOut]:
    now = now or datetime.utcnow()
    stmt = (
        select(MarketingOffer)
        .where(MarketingOffer.expires_at > now)
        .order_by(MarketingOffer.created_at.desc(), MarketingOffer.id.desc())
        .limit(limit)
    )
    return [
        OfferOut(
            id=o.id or 0,
            title=o.title,
            description=o.description or None,
            image_url=o.image_url or None,
            expires_at=o.expires_at,
            created_at=o.created_at,
        )
        for o in db.exec(stmt).all()
    ]
