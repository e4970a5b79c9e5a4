from __future__ import annotations

from datetime import datetime
from typing import Protocol

from chat_hub.domain.entities.device import Device


class DeviceReader(Protocol):
    async def list_for_user(self, user_id: int) -> list[Device]: ...


class DeviceWriter(Protocol):
    async def upsert(
        self, user_id: int, token: str, platform: str | None, created_at: datetime,
    ) -> Device:
        """Register token for user. An existing token is moved to this user."""
        ...

    async def delete_for_user(self, user_id: int, token: str) -> bool: ...

    async def delete_tokens(self, tokens: list[str]) -> int: ...
