from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from chat_hub.domain.entities.notification import NotificationRecord


class NotificationHistoryReader(Protocol):
    async def list_for_user(self, user_id: int, *, limit: int = 50) -> list[NotificationRecord]: ...


class NotificationHistoryWriter(Protocol):
    async def add(
        self,
        user_id: int,
        title: str,
        body: str,
        payload: dict[str, Any] | None,
        status: str,
        sent_at: datetime,
    ) -> NotificationRecord: ...
