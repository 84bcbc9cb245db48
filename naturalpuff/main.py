import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# .env from the project root, wherever uvicorn is started
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from naturalpuff.admin import admin_router
from naturalpuff.api.auth import router as auth_router
from naturalpuff.api.catalog import router as catalog_router
from naturalpuff.api.notifications import router as notifications_router
from naturalpuff.api.orders import router as orders_router
from naturalpuff.api.payments import router as payments_router
from naturalpuff.api.reviews import router as reviews_router
from naturalpuff.api.shipping import router as shipping_router
from naturalpuff.core.config import is_mail_configured, is_razorpay_configured, is_shiprocket_configured, settings
from naturalpuff.core.database import engine, init_db
from naturalpuff.core.rate_limit import limiter
from naturalpuff.logging import setup_logging
from naturalpuff.models import ErrorLog

setup_logging(level=logging.DEBUG if settings.debug_mode else logging.INFO)
log = logging.getLogger("naturalpuff")

CORS_ALLOWED_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-razorpay-signature",
    "x-admin-secret",
]


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info(
        "Natural Puff API started: env=%s razorpay=%s smtp=%s shiprocket=%s",
        settings.environment,
        "yes" if is_razorpay_configured() else "NO",
        "yes" if is_mail_configured() else "NO",
        "yes" if is_shiprocket_configured() else "NO",
    )
    yield


app = FastAPI(
    title="Natural Puff API",
    description="Storefront, checkout and admin API for Natural Puff",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    body = {"error": message, "status_code": status_code}
    body.update(extra)
    rid = getattr(request.state, "request_id", None)
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s limit=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests", detail=f"Rate limit exceeded: {exc.detail}")


def _validation_error_message(exc: RequestValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Invalid request."
    first = errs[0]
    loc = [str(p) for p in (first.get("loc") or []) if p != "body"]
    field = loc[-1] if loc else None
    if first.get("type") == "missing":
        return f"Missing field: {field}" if field else "Request body is missing."
    msg = str(first.get("msg") or "Invalid request.")
    return f"{field}: {msg}" if field else msg


def _jsonable_errors(errs) -> list[dict]:
    """pydantic error dicts may carry exception objects in ctx."""
    out = []
    for e in errs:
        out.append({"loc": list(e.get("loc") or []), "msg": str(e.get("msg") or ""), "type": str(e.get("type") or "")})
    return out


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.warning("Request validation error (422): path=%s method=%s detail=%s", request.url.path, request.method, errs)
    return _error_response(request, 422, _validation_error_message(exc), detail=_jsonable_errors(errs))


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    try:
        with Session(engine) as db:
            db.add(
                ErrorLog(
                    endpoint=request.url.path,
                    method=request.method,
                    request_id=getattr(request.state, "request_id", None),
                    error_message=str(exc)[:2000],
                    stack_trace=traceback.format_exc()[:10000],
                )
            )
            db.commit()
    except SQLAlchemyError as e:
        log.warning("ErrorLog write failed: %s", e)
    return _error_response(request, 500, "Unexpected server error.")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=_cors_origins_list() != ["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=CORS_ALLOWED_HEADERS,
    expose_headers=["X-Request-ID"],
)
app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(reviews_router)
app.include_router(orders_router)
app.include_router(payments_router)
app.include_router(notifications_router)
app.include_router(shipping_router)
app.include_router(admin_router)


@app.get("/health")
def health():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        log.error("Health check database error: %s", e)
        database = "error"
    return {
        "status": "ok",
        "database": database,
        "razorpay_configured": is_razorpay_configured(),
        "mail_configured": is_mail_configured(),
        "shiprocket_configured": is_shiprocket_configured(),
    }


@app.get("/debug/rate-test")
@limiter.limit("5/minute")
def rate_test(request: Request):
    """Fixed 5/minute limit for checking the limiter behind a proxy. Not served in production."""
    if settings.environment == "production":
        raise HTTPException(status_code=404, detail="Not Found")
    return {"ok": True}
