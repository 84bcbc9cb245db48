"""Admin auth: X-Admin-Secret header, constant-time compare."""
import hmac
import logging

from fastapi import Header, HTTPException, Request

from naturalpuff.core.config import settings
from naturalpuff.core.rate_limit import client_ip

log = logging.getLogger("naturalpuff.admin")


def _admin_secret_constant_time_compare(provided: str | None, expected: str | None) -> bool:
    """Timing-safe; a length mismatch still runs a same-length comparison."""
    p = (provided or "").encode("utf-8")
    e = (expected or "").encode("utf-8")
    if len(p) != len(e):
        hmac.compare_digest(e, e)
        return False
    return hmac.compare_digest(p, e)


def require_admin(
    request: Request,
    x_admin_secret: str | None = Header(None, alias="X-Admin-Secret"),
) -> None:
    expected = (settings.admin_secret or "").strip()
    if not expected:
        raise HTTPException(status_code=503, detail="Admin API is not configured (ADMIN_SECRET missing).")
    if not _admin_secret_constant_time_compare((x_admin_secret or "").strip(), expected):
        log.warning("Rejected admin request: path=%s ip=%s", request.url.path, client_ip(request))
        raise HTTPException(status_code=403, detail="Unauthorized.")
