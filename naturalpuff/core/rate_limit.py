"""SlowAPI limiter. Buckets are per client IP; behind the storefront proxy that is the first X-Forwarded-For hop."""
from fastapi import Request
from slowapi import Limiter


def client_ip(request: Request) -> str:
    first_hop = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if first_hop:
        return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(key_func=client_ip)
