from contextvars import ContextVar
from typing import Optional

from fastapi import Header, Request

from logger import logger

# request scoped values used only to tag log lines
context_user_data: ContextVar[Optional[str]] = ContextVar("user_data", default=None)


# whenever an api is hit, tag the request with the calling seller
async def build_request_context(
    request: Request,
    x_seller_id: Optional[int] = Header(default=None),
):
    context_user_data.set(f"seller:{x_seller_id}" if x_seller_id else None)
    logger.info(
        extra=context_user_data.get(),
        msg=f"REQUEST_INITIATED {request.method} {request.url.path}",
    )


def get_services(request: Request):
    """Service container built at startup and stored on the app state."""
    return request.app.state.services


def get_seller_id(x_seller_id: int = Header(...)) -> int:
    # authentication is handled upstream; the gateway forwards the seller id
    return x_seller_id
