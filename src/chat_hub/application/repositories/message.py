from __future__ import annotations

from datetime import datetime
from typing import Protocol

from chat_hub.domain.entities.message import ChannelMessage, PeerMessage


class PeerMessageReader(Protocol):
    async def list_between(
        self,
        user_id: int,
        peer_id: int,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PeerMessage]:
        """Messages exchanged in either direction, oldest first."""
        ...


class PeerMessageWriter(Protocol):
    async def create(
        self, sender_id: int, receiver_id: int, content: str, created_at: datetime,
    ) -> PeerMessage: ...


class ChannelMessageReader(Protocol):
    async def list_page(
        self, channel_id: int, *, limit: int, offset: int,
    ) -> list[ChannelMessage]:
        """Newest first."""
        ...

    async def count(self, channel_id: int) -> int: ...


class ChannelMessageWriter(Protocol):
    async def create(
        self, sender_id: int, channel_id: int, content: str, created_at: datetime,
    ) -> ChannelMessage: ...
