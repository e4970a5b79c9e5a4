from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from chat_hub.application.repositories.channel import ChannelReader, ChannelWriter
from chat_hub.application.repositories.device import DeviceReader, DeviceWriter
from chat_hub.application.repositories.message import (
    ChannelMessageReader,
    ChannelMessageWriter,
    PeerMessageReader,
    PeerMessageWriter,
)
from chat_hub.application.repositories.notification import (
    NotificationHistoryReader,
    NotificationHistoryWriter,
)


class UnitOfWork(Protocol):
    channels: ChannelReader
    channels_w: ChannelWriter
    peer_messages: PeerMessageReader
    peer_messages_w: PeerMessageWriter
    channel_messages: ChannelMessageReader
    channel_messages_w: ChannelMessageWriter
    devices: DeviceReader
    devices_w: DeviceWriter
    notifications: NotificationHistoryReader
    notifications_w: NotificationHistoryWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Opens a fresh unit of work outside of a request scope (websocket, detached tasks).
UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
