from __future__ import annotations

from datetime import datetime
from typing import Protocol

from chat_hub.domain.entities.channel import Channel, ChannelAdmin, ChannelMember


class ChannelReader(Protocol):
    async def get_by_id(self, channel_id: int) -> Channel | None: ...

    async def list_all(self) -> list[Channel]: ...

    async def list_for_member(self, user_id: int) -> list[Channel]:
        """Channels the user is a member of (membership join query)."""
        ...

    async def is_member(self, channel_id: int, user_id: int) -> bool: ...

    async def is_admin(self, channel_id: int, user_id: int) -> bool: ...

    async def list_members(self, channel_id: int) -> list[ChannelMember]: ...

    async def list_admins(self, channel_id: int) -> list[ChannelAdmin]: ...


class ChannelWriter(Protocol):
    async def create(
        self, name: str, description: str | None, created_at: datetime,
    ) -> Channel: ...

    async def add_member(self, channel_id: int, user_id: int, joined_at: datetime) -> None: ...

    async def add_admin(self, channel_id: int, user_id: int, added_at: datetime) -> bool:
        """Insert the admin row. Return False if it already existed."""
        ...

    async def remove_admin(self, channel_id: int, user_id: int) -> bool:
        """Delete the admin row. Return False if there was none."""
        ...
