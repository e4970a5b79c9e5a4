from __future__ import annotations

from typing import Protocol

from chat_hub.application.dto.push import PushMessage, PushTicket


class PushProviderError(Exception):
    """Transient provider failure: the request as a whole did not go through."""


class PushProvider(Protocol):
    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        """Deliver messages; return one ticket per message, in order."""
        ...
