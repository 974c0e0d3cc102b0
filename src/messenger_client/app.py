from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from messenger_client.api.middleware.correlation_id import CorrelationIdMiddleware
from messenger_client.api.v1.routers import (
    calls,
    conversations,
    health,
    messages,
    notices,
    session,
    ws,
)
from messenger_client.application.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from messenger_client.config import settings
from messenger_client.infrastructure.db.session import AsyncSessionLocal
from messenger_client.infrastructure.media.loopback import LoopbackMediaCapture
from messenger_client.infrastructure.remote_store import SqlAlchemyRemoteStore
from messenger_client.infrastructure.session.file_slot import FileSessionSlot
from messenger_client.infrastructure.ws.manager import ConnectionManager
from messenger_client.services.session import MessengerSession
from messenger_client.services.session_host import SessionHost

logger = logging.getLogger(__name__)


def build_host(store: SqlAlchemyRemoteStore) -> SessionHost:
    media = LoopbackMediaCapture(
        allow_video=settings.MEDIA_ALLOW_VIDEO,
        allow_audio=settings.MEDIA_ALLOW_AUDIO,
    )

    def _session_factory(user_id: UUID) -> MessengerSession:
        return MessengerSession(
            user_id,
            store,
            media,
            typing_timeout=settings.TYPING_TIMEOUT_SECONDS,
            call_tick_seconds=settings.CALL_TICK_SECONDS,
            avatar_base_url=settings.AVATAR_BASE_URL,
        )

    return SessionHost(
        store,
        FileSessionSlot(settings.SESSION_FILE),
        _session_factory,
        user_key=settings.SESSION_USER_KEY,
        avatar_base_url=settings.AVATAR_BASE_URL,
    )


def attach_broadcasts(app: FastAPI) -> None:
    """Push a fresh snapshot to every UI connection after each state change."""
    host: SessionHost = app.state.host
    manager: ConnectionManager = app.state.ws_manager

    def _on_change() -> None:
        manager.broadcast_soon(*ws.snapshot_event(host))

    host.add_listener(_on_change)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    store = SqlAlchemyRemoteStore(
        AsyncSessionLocal, app.state.redis, settings.REDIS_MESSAGES_CHANNEL,
    )
    app.state.host = build_host(store)
    app.state.ws_manager = ConnectionManager()
    attach_broadcasts(app)
    await app.state.host.restore()

    yield

    await app.state.host.close()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Messenger Client Shell",
        version="0.1.0",
        lifespan=lifespan,
    )

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
    app.include_router(session.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(calls.router)
    app.include_router(notices.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UnauthorizedError)
    async def _unauthorized(_req: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})

    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(StoreError)
    async def _store_unavailable(_req: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": exc.detail})
