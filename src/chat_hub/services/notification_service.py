"""Best-effort push notifications for delivered messages.

Every public ``notify_*`` call returns immediately: the work runs as a
detached task, and nothing it does (or fails to do) reaches the caller.
Message persistence and fan-out have already happened by the time a
notification is attempted.
"""
from __future__ import annotations

import logging
from typing import Any

from chat_hub.application.dto.push import PushMessage, PushTicket
from chat_hub.application.ports.clock import Clock, SystemClock
from chat_hub.application.ports.push import PushProvider, PushProviderError
from chat_hub.application.uow import UoWFactory
from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.domain.value_objects.enums import EnvelopeType, NotificationStatus
from chat_hub.infrastructure.background import DetachedTasks

logger = logging.getLogger(__name__)


def truncate(content: str, limit: int) -> str:
    if len(content) <= limit:
        return content
    return content[: limit - 3] + "..."


def sender_display_name(sender_id: int) -> str:
    return f"User {sender_id}"


class NotificationDispatcher:
    def __init__(
        self,
        provider: PushProvider,
        uow_factory: UoWFactory,
        tasks: DetachedTasks,
        *,
        peer_preview_length: int = 100,
        channel_preview_length: int = 80,
        clock: Clock | None = None,
    ) -> None:
        self._provider = provider
        self._uow_factory = uow_factory
        self._tasks = tasks
        self._peer_preview_length = peer_preview_length
        self._channel_preview_length = channel_preview_length
        self._clock = clock or SystemClock()

    def notify_peer_message(self, message: PeerMessage) -> None:
        title = f"New message from {sender_display_name(message.sender_id)}"
        body = truncate(message.content, self._peer_preview_length)
        data = {
            "messageType": EnvelopeType.PEER.value,
            "messageId": message.id,
            "senderId": message.sender_id,
            "timestamp": int(message.created_at.timestamp()),
        }
        self._spawn_user_notification(message.receiver_id, title, body, data)

    def notify_channel_message(self, message: ChannelMessage) -> None:
        """Notify every channel member except the sender."""
        self._tasks.spawn(
            self._notify_channel_members(message),
            name=f"notify-channel-{message.channel_id}",
        )

    async def _notify_channel_members(self, message: ChannelMessage) -> None:
        try:
            async with self._uow_factory() as uow:
                channel = await uow.channels.get_by_id(message.channel_id)
                if channel is None:
                    logger.warning("Channel %d vanished before notification", message.channel_id)
                    return
                members = await uow.channels.list_members(channel.id)
        except Exception:
            logger.exception("Error loading members of channel %d", message.channel_id)
            return

        title = f"New message in {channel.name}"
        preview = truncate(message.content, self._channel_preview_length)
        body = f"{sender_display_name(message.sender_id)}: {preview}"
        data = {
            "messageType": EnvelopeType.CHANNEL.value,
            "messageId": message.id,
            "channelId": channel.id,
            "channelName": channel.name,
            "senderId": message.sender_id,
            "timestamp": int(message.created_at.timestamp()),
        }
        for member in members:
            if member.user_id == message.sender_id:
                continue
            self._spawn_user_notification(member.user_id, title, body, data)

    def _spawn_user_notification(
        self, user_id: int, title: str, body: str, data: dict[str, Any],
    ) -> None:
        self._tasks.spawn(
            self.send_user_notification(user_id, title, body, data),
            name=f"notify-user-{user_id}",
        )

    async def send_user_notification(
        self, user_id: int, title: str, body: str, data: dict[str, Any],
    ) -> bool:
        """Push to every device of user_id. Returns True when nothing failed."""
        try:
            return await self._send(user_id, title, body, data)
        except Exception:
            logger.exception("Failed to send notification to user %d", user_id)
            return False

    async def _send(self, user_id: int, title: str, body: str, data: dict[str, Any]) -> bool:
        async with self._uow_factory() as uow:
            devices = await uow.devices.list_for_user(user_id)
        if not devices:
            return True

        messages = [PushMessage(token=d.token, title=title, body=body, data=data) for d in devices]
        error: str | None = None
        tickets: list[PushTicket] = []
        try:
            tickets = await self._provider.send(messages)
        except PushProviderError as exc:
            error = str(exc)
        except Exception as exc:
            # Still a failed attempt; the history row below must be written.
            logger.exception("Push provider crashed for user %d", user_id)
            error = f"{type(exc).__name__}: {exc}"

        delivered = bool(tickets) and all(t.ok for t in tickets)
        invalid = [t.token for t in tickets if t.invalid_token]
        if error is None and not delivered:
            error = "; ".join(f"{t.token}: {t.error}" for t in tickets if not t.ok)

        async with self._uow_factory() as uow:
            await uow.notifications_w.add(
                user_id,
                title,
                body,
                data,
                NotificationStatus.SENT if delivered else NotificationStatus.FAILED,
                self._clock.now(),
            )
            if invalid:
                removed = await uow.devices_w.delete_tokens(invalid)
                logger.info("Cleaned up %d invalid push tokens of user %d", removed, user_id)
            await uow.commit()

        if not delivered:
            logger.warning("Failed to send notification to user %d: %s", user_id, error)
        return delivered
