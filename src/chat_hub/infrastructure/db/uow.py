from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from chat_hub.infrastructure.db.repositories.channel import (
    ChannelReaderRepo,
    ChannelWriterRepo,
)
from chat_hub.infrastructure.db.repositories.device import DeviceReaderRepo, DeviceWriterRepo
from chat_hub.infrastructure.db.repositories.message import (
    ChannelMessageReaderRepo,
    ChannelMessageWriterRepo,
    PeerMessageReaderRepo,
    PeerMessageWriterRepo,
)
from chat_hub.infrastructure.db.repositories.notification import (
    NotificationHistoryReaderRepo,
    NotificationHistoryWriterRepo,
)


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.channels = ChannelReaderRepo(session)
        self.channels_w = ChannelWriterRepo(session)
        self.peer_messages = PeerMessageReaderRepo(session)
        self.peer_messages_w = PeerMessageWriterRepo(session)
        self.channel_messages = ChannelMessageReaderRepo(session)
        self.channel_messages_w = ChannelMessageWriterRepo(session)
        self.devices = DeviceReaderRepo(session)
        self.devices_w = DeviceWriterRepo(session)
        self.notifications = NotificationHistoryReaderRepo(session)
        self.notifications_w = NotificationHistoryWriterRepo(session)

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
