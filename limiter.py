import http

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address


# sellers are limited on their own id, anonymous callers on their address
def seller_or_remote_address(request: Request) -> str:
    seller_id = request.headers.get("x-seller-id")
    if seller_id:
        return f"seller:{seller_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=seller_or_remote_address)


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=http.HTTPStatus.TOO_MANY_REQUESTS,
        content={"status": False, "message": "Too many requests. Slow down!", "data": {}},
    )
