from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from messaging_service.api.middleware.correlation_id import CorrelationIdMiddleware
from messaging_service.api.middleware.metrics import RequestTimingMiddleware
from messaging_service.api.v1.routers import (
    access,
    conversations,
    health,
    messages,
)
from messaging_service.application.exceptions import (
    ForbiddenError,
    MessagingDeniedError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from messaging_service.config import settings
from messaging_service.infrastructure.db.errors import STORE_ERRORS, as_store_unavailable
from messaging_service.infrastructure.db.session import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Messaging service starting")
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Talent Messaging Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(access.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)

    return app


def _store_unavailable_response(exc: StoreUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": exc.detail},
        headers={"Retry-After": str(settings.STORE_RETRY_AFTER_SECONDS)},
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(MessagingDeniedError)
    async def _messaging_denied(_req: Request, exc: MessagingDeniedError) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={
                "detail": exc.detail,
                "denial": exc.decision.denial,
                "requires_subscription": exc.decision.requires_subscription,
            },
        )

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(StoreUnavailableError)
    async def _store_unavailable(_req: Request, exc: StoreUnavailableError) -> JSONResponse:
        logger.warning("Store unavailable: %s", exc.detail)
        return _store_unavailable_response(exc)

    async def _raw_store_error(req: Request, exc: Exception) -> JSONResponse:
        logger.warning("Store error on %s %s", req.method, req.url.path, exc_info=exc)
        return _store_unavailable_response(as_store_unavailable(exc))

    for exc_class in STORE_ERRORS:
        app.add_exception_handler(exc_class, _raw_store_error)
