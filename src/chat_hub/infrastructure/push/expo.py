"""Expo push API client."""
from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from chat_hub.application.dto.push import PushMessage, PushTicket
from chat_hub.application.ports.push import PushProviderError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"^Expo(nent)?PushToken\[.+\]$")

# Ticket errors meaning the token will never work again.
INVALID_TOKEN_ERRORS = frozenset({"DeviceNotRegistered"})


def is_expo_token(token: str) -> bool:
    return bool(_TOKEN_RE.match(token))


class ExpoPushProvider:
    """Implements application.ports.push.PushProvider."""

    def __init__(
        self,
        url: str,
        *,
        access_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport

    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        tickets: dict[int, PushTicket] = {}
        outgoing: list[tuple[int, PushMessage]] = []
        for i, msg in enumerate(messages):
            if is_expo_token(msg.token):
                outgoing.append((i, msg))
            else:
                logger.info("Invalid push token format %s", msg.token)
                tickets[i] = PushTicket(
                    token=msg.token, ok=False, error="InvalidTokenFormat", invalid_token=True,
                )

        if outgoing:
            data = await self._post([self._to_payload(msg) for _, msg in outgoing])
            if len(data) != len(outgoing):
                raise PushProviderError(
                    f"Expo returned {len(data)} tickets for {len(outgoing)} messages"
                )
            for (i, msg), item in zip(outgoing, data):
                tickets[i] = self._to_ticket(msg.token, item)

        return [tickets[i] for i in range(len(messages))]

    async def _post(self, payload: list[dict[str, Any]]) -> list[dict[str, Any]]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise PushProviderError(f"Expo request failed: {exc}") from exc
        if resp.status_code != 200:
            raise PushProviderError(f"Expo error {resp.status_code}: {resp.text}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise PushProviderError(f"Expo returned a non-JSON body: {resp.text[:200]}") from exc
        if not isinstance(body, dict):
            raise PushProviderError(f"Expo returned an unexpected body: {body!r}")
        if "errors" in body and "data" not in body:
            raise PushProviderError(f"Expo rejected request: {body['errors']}")
        data = body.get("data", [])
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise PushProviderError(f"Expo returned malformed tickets: {data!r}")
        return data

    @staticmethod
    def _to_payload(msg: PushMessage) -> dict[str, Any]:
        return {
            "to": msg.token,
            "title": msg.title,
            "body": msg.body,
            "data": msg.data,
            "sound": "default",
            "priority": "default",
        }

    @staticmethod
    def _to_ticket(token: str, item: dict[str, Any]) -> PushTicket:
        if item.get("status") == "ok":
            return PushTicket(token=token, ok=True)
        details = item.get("details")
        error = (
            (details.get("error") if isinstance(details, dict) else None)
            or item.get("message")
            or "unknown"
        )
        return PushTicket(
            token=token,
            ok=False,
            error=error,
            invalid_token=error in INVALID_TOKEN_ERRORS,
        )
