"""Gatekeeping for inbound realtime messages.

An envelope is validated, persisted, and only then handed to the hub for
fan-out. Anything rejected on the way is reported back to the sending
connection as an ``error`` frame and is neither stored nor broadcast.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from chat_hub.application.exceptions import AppError, ValidationError
from chat_hub.application.ports.clock import Clock, SystemClock
from chat_hub.application.uow import UoWFactory
from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.domain.value_objects.enums import EnvelopeType
from chat_hub.infrastructure.ws.connection import Connection
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.infrastructure.ws.protocol import (
    WsInbound,
    channel_frame,
    error_frame,
    peer_frame,
)
from chat_hub.services import message_service
from chat_hub.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def validate_envelope(envelope: WsInbound) -> None:
    """Structural checks that need no database access.

    Whitespace-only content counts as empty: such a message would render
    as a blank bubble and is rejected on purpose.
    """
    if envelope.type == EnvelopeType.PEER:
        peer = envelope.peer_message
        if peer is None:
            raise ValidationError("peer_message is required")
        if peer.receiver_id <= 0:
            raise ValidationError("Invalid receiver_id")
        if not peer.content.strip():
            raise ValidationError("Message content cannot be empty")

    elif envelope.type == EnvelopeType.CHANNEL:
        chan = envelope.channel_message
        if chan is None:
            raise ValidationError("channel_message is required")
        if chan.channel_id <= 0:
            raise ValidationError("Invalid channel_id")
        if not chan.content.strip():
            raise ValidationError("Message content cannot be empty")

    else:
        raise ValidationError(f"Invalid message type: {envelope.type!r}")


class MessageRouter:
    def __init__(
        self,
        hub: Hub,
        notifier: NotificationDispatcher,
        uow_factory: UoWFactory,
        clock: Clock | None = None,
    ) -> None:
        self._hub = hub
        self._notifier = notifier
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()

    async def handle_frame(self, connection: Connection, raw: str) -> None:
        """Read-pump callback. Never raises for a bad or failed message."""
        try:
            envelope = WsInbound.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.info("Undecodable frame from %r (%d errors)", connection, exc.error_count())
            connection.enqueue(error_frame("invalid_payload", "Malformed message envelope"))
            return

        try:
            await self.route(envelope, connection.user_id)
        except AppError as exc:
            logger.info("Rejected message from user %d: %s", connection.user_id, exc.detail)
            connection.enqueue(error_frame(exc.code, exc.detail))
        except Exception:
            logger.exception("Error saving message from user %d", connection.user_id)
            connection.enqueue(error_frame("send_failed", "Message could not be saved"))

    async def route(self, envelope: WsInbound, sender_id: int) -> PeerMessage | ChannelMessage:
        validate_envelope(envelope)
        now = self._clock.now()

        if envelope.type == EnvelopeType.PEER:
            assert envelope.peer_message is not None
            async with self._uow_factory() as uow:
                peer = await message_service.send_peer_message(
                    sender_id,
                    envelope.peer_message.receiver_id,
                    envelope.peer_message.content,
                    now,
                    uow,
                )
            self._hub.broadcast_to_user(peer.receiver_id, peer_frame(peer))
            self._notifier.notify_peer_message(peer)
            return peer

        assert envelope.channel_message is not None
        async with self._uow_factory() as uow:
            post = await message_service.send_channel_message(
                sender_id,
                envelope.channel_message.channel_id,
                envelope.channel_message.content,
                now,
                uow,
            )
        self._hub.broadcast_to_channel(post.channel_id, channel_frame(post))
        self._notifier.notify_channel_message(post)
        return post
