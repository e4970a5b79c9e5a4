from __future__ import annotations

import logging

from chat_hub.application.uow import UoWFactory
from chat_hub.domain.value_objects.enums import FrameType
from chat_hub.infrastructure.ws.connection import Connection
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.infrastructure.ws.protocol import control_frame

logger = logging.getLogger(__name__)


async def load_channel_subscriptions(
    hub: Hub,
    connection: Connection,
    uow_factory: UoWFactory,
) -> int:
    """Subscribe a freshly registered connection to the user's channels.

    Runs detached from the handshake. Channel posts made before this
    finishes are not replayed to the connection. Once the subscriptions
    are queued on the hub, a ``connection_established`` frame follows them.
    Returns the number of channels, or -1 if they could not be loaded.
    """
    try:
        async with uow_factory() as uow:
            channels = await uow.channels.list_for_member(connection.user_id)
    except Exception:
        logger.exception("Error loading channels for user %d", connection.user_id)
        return -1

    logger.info("Subscribing user %d to %d channels", connection.user_id, len(channels))
    for channel in channels:
        hub.subscribe_to_channel(channel.id, connection)
    hub.send_to_connection(connection, control_frame(FrameType.CONNECTION_ESTABLISHED))
    return len(channels)
