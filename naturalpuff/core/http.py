"""Outbound JSON calls (Razorpay, Shiprocket) over urllib."""
import json
import logging
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request as UrlRequest, urlopen

log = logging.getLogger("naturalpuff.http")

DEFAULT_TIMEOUT = 20


class UpstreamUnavailable(Exception):
    """Connection-level failure: DNS, refused, timeout."""


def request_json(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    payload: dict | None = None,
    params: dict | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> tuple[int, dict]:
    """
    Sends one request and returns (status_code, body).
    Non-2xx answers are returned, not raised: callers decide what the upstream message means.
    Body is {} when the response is empty or not JSON.
    """
    if params:
        url = f"{url}?{urlencode(params)}"
    data = json.dumps(payload).encode() if payload is not None else None
    req_headers = {"Content-Type": "application/json", "Accept": "application/json"}
    req_headers.update(headers or {})
    req = UrlRequest(url, data=data, method=method.upper(), headers=req_headers)
    try:
        with urlopen(req, timeout=timeout) as resp:
            return resp.status, _parse_body(resp.read())
    except HTTPError as e:
        body = _parse_body(e.read() if e.fp is not None else b"")
        log.warning("Upstream %s %s -> %s", method.upper(), url.split("?", 1)[0], e.code)
        return e.code, body
    except (URLError, OSError) as e:
        raise UpstreamUnavailable(str(e)[:200]) from e


def _parse_body(raw: bytes) -> dict:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return {}
    if isinstance(parsed, dict):
        return parsed
    # Some endpoints answer with a bare list
    return {"items": parsed}
