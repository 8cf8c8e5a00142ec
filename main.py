from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded

from config import Settings, get_settings
from context_manager.container import ServiceContainer, build_services
from database import build_engine, build_session_factory, init_models
from limiter import limiter, rate_limit_handler
from logger import logger
from router import CommonRouter, DefaultRouter, StatusRouter
from utils.exception_handler import (
    custom_http_exception_handler,
    handle_shipping_error,
    handle_validation_error,
)
from utils.exceptions import ShippingError


@asynccontextmanager
async def lifespan(app: FastAPI):
    # a container handed in by the caller (tests) is owned by the caller
    if getattr(app.state, "services", None) is not None:
        yield
        return

    settings: Settings = app.state.settings

    engine = build_engine(settings.database_url)
    init_models(engine)

    http_client = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)
    app.state.services = build_services(
        settings, engine, build_session_factory(engine), http_client
    )
    logger.info(
        msg=f"Started with couriers {[a.slug for a in app.state.services.registry.active()]}",
    )

    try:
        yield
    finally:
        await http_client.aclose()
        engine.dispose()
        app.state.services = None


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings or (services.settings if services else get_settings())
    app.state.services = services

    # Routers
    app.include_router(StatusRouter)
    app.include_router(DefaultRouter)
    app.include_router(CommonRouter)

    # Exception handlers
    app.add_exception_handler(ShippingError, handle_shipping_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(HTTPException, custom_http_exception_handler)

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
