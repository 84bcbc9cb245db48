import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlmodel import Session, select

from naturalpuff.api.deps import get_current_user
from naturalpuff.core.config import settings
from naturalpuff.core.database import get_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.core.security import create_access_token, hash_password, verify_password
from naturalpuff.models import Order, User
from naturalpuff.schemas import Token, UserCreate, UserLogin, UserOrderSummary, UserResponse, UserUpdate

router = APIRouter(prefix="/auth", tags=["auth"])
log = logging.getLogger("naturalpuff.auth")

_REGISTER_LIMIT = f"{settings.rate_limit_register_per_minute}/minute;100/hour"
_LOGIN_LIMIT = f"{settings.rate_limit_login_per_minute}/minute;20/hour"


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id or 0,
        email=user.email,
        full_name=user.full_name or "",
        phone=user.phone,
        address=user.address,
        city=user.city,
        state=user.state,
        pincode=user.pincode,
    )


def _first_error(exc: ValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Invalid request."
    msg = str(errs[0].get("msg") or "Invalid request.")
    return msg.removeprefix("Value error, ")


async def _form_or_json(request: Request) -> dict:
    """Storefront posts forms; API clients may post JSON."""
    if (request.headers.get("content-type") or "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=422, detail="Invalid JSON body.")
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return {k: form.get(k) for k in form}


@router.post("/register", response_model=UserResponse)
@limiter.limit(_REGISTER_LIMIT)
async def register(request: Request, db: Session = Depends(get_db)):
    raw = await _form_or_json(request)
    try:
        body = UserCreate(
            email=(raw.get("email") or "").strip(),
            password=raw.get("password") or "",
            full_name=raw.get("full_name") or "",
            phone=(raw.get("phone") or "").strip() or None,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_first_error(e))
    email = body.email.lower()
    if db.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=400, detail="This e-mail address is already registered.")
    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=body.full_name,
        phone=body.phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("User registered: id=%s", user.id)
    return _user_response(user)


@router.post("/login", response_model=Token)
@limiter.limit(_LOGIN_LIMIT)
async def login(request: Request, db: Session = Depends(get_db)):
    raw = await _form_or_json(request)
    try:
        body = UserLogin(email=(raw.get("email") or "").strip(), password=raw.get("password") or "")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_first_error(e))
    if not body.password:
        raise HTTPException(status_code=422, detail="Please enter your password.")
    user = db.exec(select(User).where(User.email == body.email.lower())).first()
    if not user or not verify_password(body.password, user.hashed_password):
        log.warning("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Incorrect e-mail or password.")
    user.last_login_at = datetime.utcnow()
    db.add(user)
    db.commit()
    return Token(access_token=create_access_token(user.id or 0, user.email))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return _user_response(user)


@router.patch("/me", response_model=UserResponse)
def update_me(
    body: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Profile and default delivery address, prefilled at checkout."""
    for name, value in body.model_dump(exclude_unset=True).items():
        if isinstance(value, str):
            value = value.strip() or None
        if name == "full_name":
            value = value or user.full_name
        setattr(user, name, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return _user_response(user)


@router.get("/orders", response_model=list[UserOrderSummary])
def my_orders(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stmt = select(Order).where(Order.user_id == user.id).order_by(Order.created_at.desc()).limit(100)
    return [
        UserOrderSummary(
            id=o.id,
            status=o.status,
            total_amount=o.total_amount,
            payment_method=o.payment_method,
            created_at=o.created_at,
        )
        for o in db.exec(stmt).all()
    ]
