"""Dashboard numbers: order count, revenue, products, status breakdown, latest orders."""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import ContactMessage, Order, Product

router = APIRouter()


@router.get("/stats")
def stats(db: Session = Depends(get_db)):
    total_orders = db.exec(select(func.count()).select_from(Order)).one()
    revenue = db.exec(select(func.coalesce(func.sum(Order.total_amount), 0)).where(Order.status.in_(("paid", "shipped")))).one()
    total_products = db.exec(select(func.count()).select_from(Product)).one()
    out_of_stock = db.exec(
        select(func.count()).select_from(Product).where((Product.stock == None) | (Product.stock <= 0))  # noqa: E711
    ).one()
    unanswered = db.exec(
        select(func.count()).select_from(ContactMessage).where(ContactMessage.responded == False)  # noqa: E712
    ).one()
    by_status = {s: c for s, c in db.exec(select(Order.status, func.count()).group_by(Order.status)).all()}
    recent = db.exec(select(Order).order_by(Order.created_at.desc()).limit(5)).all()
    return {
        "total_orders": total_orders,
        "total_revenue": int(revenue or 0),
        "total_products": total_products,
        "out_of_stock_products": out_of_stock,
        "unanswered_messages": unanswered,
        "orders_by_status": by_status,
        "recent_orders": [
            {
                "id": o.id,
                "customer_name": o.customer_name,
                "total_amount": o.total_amount,
                "status": o.status,
                "created_at": o.created_at,
            }
            for o in recent
        ],
    }
