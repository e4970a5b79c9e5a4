from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_hub.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_hub.api.v1.routers import channels, devices, health, messages, ws
from chat_hub.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from chat_hub.application.ports.push import PushProvider
from chat_hub.application.uow import UoWFactory
from chat_hub.config import settings
from chat_hub.infrastructure.background import DetachedTasks
from chat_hub.infrastructure.db.session import open_uow
from chat_hub.infrastructure.push.expo import ExpoPushProvider
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.services.message_router import MessageRouter
from chat_hub.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    await app.state.hub.start()

    yield

    await app.state.hub.stop()
    pending = len(app.state.tasks)
    await app.state.tasks.cancel_all()
    logger.info("Cancelled %d background tasks", pending)


def create_app(
    *,
    uow_factory: UoWFactory | None = None,
    push_provider: PushProvider | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Chat Hub Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    uow_factory = uow_factory or open_uow
    push_provider = push_provider or ExpoPushProvider(
        settings.EXPO_PUSH_URL,
        access_token=settings.EXPO_ACCESS_TOKEN,
        timeout=settings.PUSH_TIMEOUT_SECONDS,
    )
    tasks = DetachedTasks()
    hub = Hub()
    notifier = NotificationDispatcher(
        push_provider,
        uow_factory,
        tasks,
        peer_preview_length=settings.NOTIFY_PEER_PREVIEW_LENGTH,
        channel_preview_length=settings.NOTIFY_CHANNEL_PREVIEW_LENGTH,
    )
    app.state.uow_factory = uow_factory
    app.state.tasks = tasks
    app.state.hub = hub
    app.state.notifier = notifier
    app.state.message_router = MessageRouter(hub, notifier, uow_factory)

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
    app.include_router(channels.router)
    app.include_router(messages.router)
    app.include_router(devices.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
