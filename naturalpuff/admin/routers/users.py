"""Customer accounts: list with order totals, detail with every order and its items, owner lookup by order."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, select

from naturalpuff.api.orders import serialize_order
from naturalpuff.core.database import get_db
from naturalpuff.models import Order, User

router = APIRouter()


def _profile(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name or "",
        "phone": user.phone,
        "address": user.address,
        "city": user.city,
        "state": user.state,
        "pincode": user.pincode,
        "created_at": user.created_at,
        "last_login_at": user.last_login_at,
    }


@router.get("")
def users_list(
    q: str | None = Query(None, max_length=100),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stmt = select(User).order_by(User.id.desc()).limit(limit)
    if q and q.strip():
        like = f"%{q.strip()}%"
        stmt = stmt.where(User.email.ilike(like) | User.full_name.ilike(like) | User.phone.ilike(like))
    users = list(db.exec(stmt).all())
    user_ids = [u.id for u in users]
    order_count: dict[int, int] = {}
    total_spent: dict[int, int] = {}
    if user_ids:
        for uid, count in db.exec(
            select(Order.user_id, func.count(Order.id)).where(Order.user_id.in_(user_ids)).group_by(Order.user_id)
        ).all():
            order_count[uid] = count
        # Only money actually received
        for uid, spent in db.exec(
            select(Order.user_id, func.sum(Order.total_amount))
            .where(Order.user_id.in_(user_ids), Order.paid_at.is_not(None))
            .group_by(Order.user_id)
        ).all():
            total_spent[uid] = int(spent or 0)
    return [
        {**_profile(u), "order_count": order_count.get(u.id, 0), "total_spent": total_spent.get(u.id, 0)}
        for u in users
    ]


@router.get("/by-order/{order_id}")
def user_by_order(order_id: str, db: Session = Depends(get_db)):
    """The order and, unless it was a guest checkout, the account that placed it."""
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    user = db.get(User, order.user_id) if order.user_id else None
    return {"order": serialize_order(db, order), "user": _profile(user) if user else None}


@router.get("/{user_id}")
def user_detail(user_id: int, db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    orders = db.exec(select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())).all()
    return {**_profile(user), "orders": [serialize_order(db, o) for o in orders]}
