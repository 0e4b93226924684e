from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from match_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from match_chat.api.middleware.metrics import RequestTimingMiddleware
from match_chat.api.v1.routers import (
    conversations,
    health,
    messages,
    notifications,
    ws,
)
from match_chat.application.exceptions import (
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    ValidationError,
)
from match_chat.config import settings
from match_chat.infrastructure.bus.redis_streams import RedisStreamConsumer
from match_chat.infrastructure.db.uow import sqlalchemy_uow
from match_chat.infrastructure.ws.hub import RealtimeHub
from match_chat.workers.match_events_consumer import MatchEventHandler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    consumer: RedisStreamConsumer | None = None
    if settings.MATCH_EVENTS_ENABLED:
        hub: RealtimeHub = app.state.hub
        consumer = RedisStreamConsumer(
            app.state.redis,
            settings.MATCH_EVENTS_STREAM,
            settings.MATCH_EVENTS_GROUP,
            f"api-{uuid.uuid4().hex[:8]}",
            MatchEventHandler(sqlalchemy_uow, hub.push_to_user),
        )
        await consumer.start()

    yield

    if consumer is not None:
        await consumer.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app(hub: RealtimeHub | None = None) -> FastAPI:
    app = FastAPI(
        title="Match Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.hub = hub or RealtimeHub(
        sqlalchemy_uow, send_timeout=settings.WS_SEND_TIMEOUT_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(notifications.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(UnauthorizedError)
    async def _unauthorized(_req: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(RateLimitedError)
    async def _rate_limited(_req: Request, exc: RateLimitedError) -> JSONResponse:
        headers = {"Retry-After": str(int(exc.retry_after))} if exc.retry_after else None
        return JSONResponse(status_code=429, content={"detail": exc.detail}, headers=headers)
