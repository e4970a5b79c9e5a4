from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from chat_hub.api.deps import HubDep, RouterDep, get_verifier
from chat_hub.api.middleware.correlation_id import correlation_id_ctx
from chat_hub.application.dto.principal import Principal
from chat_hub.config import settings
from chat_hub.domain.value_objects.enums import FrameType
from chat_hub.infrastructure.ws.connection import Connection
from chat_hub.infrastructure.ws.protocol import control_frame
from chat_hub.services.subscription_service import load_channel_subscriptions

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/{user_id}")
async def ws_chat(
    websocket: WebSocket,
    user_id: int,
    hub: HubDep,
    message_router: RouterDep,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return
    if principal.user_id != user_id:
        await websocket.close(code=4003, reason="Token does not match user")
        return

    try:
        await asyncio.wait_for(websocket.accept(), timeout=settings.WS_HANDSHAKE_TIMEOUT_SECONDS)
    except TimeoutError:
        logger.warning("WS handshake timed out for user %d", user_id)
        return

    connection = Connection(websocket, user_id, queue_size=settings.WS_SEND_QUEUE_SIZE)
    cid_token = correlation_id_ctx.set(connection.id)
    logger.info("WS connection established for user %d", user_id)

    # Register first so the handshake completes without waiting on the database.
    hub.register(connection)
    writer = asyncio.create_task(connection.write_pump(), name=f"ws-writer-{connection.id}")
    heartbeat = asyncio.create_task(_heartbeat(connection), name=f"ws-heartbeat-{connection.id}")
    websocket.app.state.tasks.spawn(
        load_channel_subscriptions(hub, connection, websocket.app.state.uow_factory),
        name=f"ws-subscriptions-{connection.id}",
    )

    try:
        await connection.read_pump(message_router.handle_frame)
    except WebSocketDisconnect as exc:
        logger.info("WS closed for user %d (code=%s)", user_id, exc.code)
    except Exception:
        logger.exception("WS error for %r", connection)
    finally:
        heartbeat.cancel()
        hub.unregister(connection)
        # The hub may already be stopped; the writer must exit regardless.
        connection.close()
        await writer
        correlation_id_ctx.reset(cid_token)


async def _heartbeat(connection: Connection) -> None:
    frame = control_frame(FrameType.HEARTBEAT)
    while not connection.closed:
        await asyncio.sleep(settings.WS_HEARTBEAT_SECONDS)
        connection.enqueue(frame)
