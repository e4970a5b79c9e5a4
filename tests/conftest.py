"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import itertools
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator

import jwt
import pytest

from chat_hub.application.dto.principal import Principal
from chat_hub.application.dto.push import PushMessage, PushTicket
from chat_hub.application.ports.push import PushProviderError
from chat_hub.config import settings
from chat_hub.domain.entities.channel import Channel, ChannelAdmin, ChannelMember
from chat_hub.domain.entities.device import Device
from chat_hub.domain.entities.message import ChannelMessage, PeerMessage
from chat_hub.domain.entities.notification import NotificationRecord
from chat_hub.infrastructure.ws.connection import Connection

_ids = itertools.count(1)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def make_token(sub: int = 1, roles: list | None = None) -> str:
    return jwt.encode(
        {"sub": str(sub), "roles": roles or []},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def auth(sub: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=1)


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=2)


# -- repositories ---------------------------------------------------------


@dataclass
class FakeChannelReader:
    _channels: dict[int, Channel] = field(default_factory=dict)
    _members: dict[int, dict[int, ChannelMember]] = field(default_factory=dict)
    _admins: dict[int, dict[int, ChannelAdmin]] = field(default_factory=dict)

    async def get_by_id(self, channel_id: int) -> Channel | None:
        return self._channels.get(channel_id)

    async def list_all(self) -> list[Channel]:
        return sorted(self._channels.values(), key=lambda c: c.id)

    async def list_for_member(self, user_id: int) -> list[Channel]:
        return [
            self._channels[cid]
            for cid, members in self._members.items()
            if user_id in members and cid in self._channels
        ]

    async def is_member(self, channel_id: int, user_id: int) -> bool:
        return user_id in self._members.get(channel_id, {})

    async def is_admin(self, channel_id: int, user_id: int) -> bool:
        return user_id in self._admins.get(channel_id, {})

    async def list_members(self, channel_id: int) -> list[ChannelMember]:
        return list(self._members.get(channel_id, {}).values())

    async def list_admins(self, channel_id: int) -> list[ChannelAdmin]:
        return list(self._admins.get(channel_id, {}).values())


@dataclass
class FakeChannelWriter:
    _reader: FakeChannelReader

    async def create(self, name: str, description: str | None, created_at: datetime) -> Channel:
        channel = Channel(id=next(_ids), name=name, description=description, created_at=created_at)
        self._reader._channels[channel.id] = channel
        return channel

    async def add_member(self, channel_id: int, user_id: int, joined_at: datetime) -> None:
        members = self._reader._members.setdefault(channel_id, {})
        members.setdefault(user_id, ChannelMember(channel_id, user_id, joined_at))

    async def add_admin(self, channel_id: int, user_id: int, added_at: datetime) -> bool:
        admins = self._reader._admins.setdefault(channel_id, {})
        if user_id in admins:
            return False
        admins[user_id] = ChannelAdmin(channel_id, user_id, added_at)
        return True

    async def remove_admin(self, channel_id: int, user_id: int) -> bool:
        return self._reader._admins.get(channel_id, {}).pop(user_id, None) is not None


@dataclass
class FakePeerMessageReader:
    _messages: list[PeerMessage] = field(default_factory=list)

    async def list_between(
        self, user_id: int, peer_id: int, *, limit: int = 100, offset: int = 0,
    ) -> list[PeerMessage]:
        pair = {user_id, peer_id}
        found = [m for m in self._messages if {m.sender_id, m.receiver_id} == pair]
        found.sort(key=lambda m: (m.created_at, m.id))
        return found[offset:offset + limit]


@dataclass
class FakePeerMessageWriter:
    _reader: FakePeerMessageReader

    async def create(
        self, sender_id: int, receiver_id: int, content: str, created_at: datetime,
    ) -> PeerMessage:
        msg = PeerMessage(next(_ids), sender_id, receiver_id, content, created_at)
        self._reader._messages.append(msg)
        return msg


@dataclass
class FakeChannelMessageReader:
    _messages: list[ChannelMessage] = field(default_factory=list)

    async def list_page(self, channel_id: int, *, limit: int, offset: int) -> list[ChannelMessage]:
        found = [m for m in self._messages if m.channel_id == channel_id]
        found.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        return found[offset:offset + limit]

    async def count(self, channel_id: int) -> int:
        return sum(1 for m in self._messages if m.channel_id == channel_id)


@dataclass
class FakeChannelMessageWriter:
    _reader: FakeChannelMessageReader

    async def create(
        self, sender_id: int, channel_id: int, content: str, created_at: datetime,
    ) -> ChannelMessage:
        msg = ChannelMessage(next(_ids), sender_id, channel_id, content, created_at)
        self._reader._messages.append(msg)
        return msg


@dataclass
class FakeDeviceReader:
    _devices: dict[str, Device] = field(default_factory=dict)

    async def list_for_user(self, user_id: int) -> list[Device]:
        return [d for d in self._devices.values() if d.user_id == user_id]


@dataclass
class FakeDeviceWriter:
    _reader: FakeDeviceReader

    async def upsert(
        self, user_id: int, token: str, platform: str | None, created_at: datetime,
    ) -> Device:
        existing = self._reader._devices.get(token)
        device = Device(
            id=existing.id if existing else next(_ids),
            user_id=user_id,
            token=token,
            platform=platform,
            created_at=existing.created_at if existing else created_at,
        )
        self._reader._devices[token] = device
        return device

    async def delete_for_user(self, user_id: int, token: str) -> bool:
        device = self._reader._devices.get(token)
        if device is None or device.user_id != user_id:
            return False
        del self._reader._devices[token]
        return True

    async def delete_tokens(self, tokens: list[str]) -> int:
        return sum(1 for t in tokens if self._reader._devices.pop(t, None) is not None)


@dataclass
class FakeNotificationReader:
    _records: list[NotificationRecord] = field(default_factory=list)

    async def list_for_user(self, user_id: int, *, limit: int = 50) -> list[NotificationRecord]:
        found = [r for r in self._records if r.user_id == user_id]
        return list(reversed(found))[:limit]


@dataclass
class FakeNotificationWriter:
    _reader: FakeNotificationReader

    async def add(
        self,
        user_id: int,
        title: str,
        body: str,
        payload: dict[str, Any] | None,
        status: str,
        sent_at: datetime,
    ) -> NotificationRecord:
        record = NotificationRecord(next(_ids), user_id, title, body, payload, status, sent_at)
        self._reader._records.append(record)
        return record


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    channels: FakeChannelReader = field(default_factory=FakeChannelReader)
    channels_w: Any = None
    peer_messages: FakePeerMessageReader = field(default_factory=FakePeerMessageReader)
    peer_messages_w: Any = None
    channel_messages: FakeChannelMessageReader = field(default_factory=FakeChannelMessageReader)
    channel_messages_w: Any = None
    devices: FakeDeviceReader = field(default_factory=FakeDeviceReader)
    devices_w: Any = None
    notifications: FakeNotificationReader = field(default_factory=FakeNotificationReader)
    notifications_w: Any = None
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.channels_w is None:
            self.channels_w = FakeChannelWriter(self.channels)
        if self.peer_messages_w is None:
            self.peer_messages_w = FakePeerMessageWriter(self.peer_messages)
        if self.channel_messages_w is None:
            self.channel_messages_w = FakeChannelMessageWriter(self.channel_messages)
        if self.devices_w is None:
            self.devices_w = FakeDeviceWriter(self.devices)
        if self.notifications_w is None:
            self.notifications_w = FakeNotificationWriter(self.notifications)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUoW):
    """Every unit of work handed out shares the same in-memory store."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[FakeUoW]:
        yield uow

    return factory


def add_channel(
    uow: FakeUoW,
    *,
    name: str = "signals",
    members: tuple[int, ...] = (),
    admins: tuple[int, ...] = (),
) -> Channel:
    now = _now()
    channel = Channel(id=next(_ids), name=name, description=None, created_at=now)
    uow.channels._channels[channel.id] = channel
    for user_id in (*members, *admins):
        uow.channels._members.setdefault(channel.id, {})[user_id] = ChannelMember(channel.id, user_id, now)
    for user_id in admins:
        uow.channels._admins.setdefault(channel.id, {})[user_id] = ChannelAdmin(channel.id, user_id, now)
    return channel


def add_device(uow: FakeUoW, user_id: int, token: str | None = None) -> Device:
    token = token or f"ExponentPushToken[user-{user_id}]"
    device = Device(id=next(_ids), user_id=user_id, token=token, platform="ios", created_at=_now())
    uow.devices._devices[token] = device
    return device


# -- push ---------------------------------------------------------------


@dataclass
class FakePushProvider:
    calls: list[list[PushMessage]] = field(default_factory=list)
    invalid_tokens: set[str] = field(default_factory=set)
    fail: bool = False

    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        self.calls.append(list(messages))
        if self.fail:
            raise PushProviderError("provider unavailable")
        return [
            PushTicket(token=m.token, ok=False, error="DeviceNotRegistered", invalid_token=True)
            if m.token in self.invalid_tokens
            else PushTicket(token=m.token, ok=True)
            for m in messages
        ]

    def tokens(self) -> list[str]:
        return [m.token for call in self.calls for m in call]


# -- transport ------------------------------------------------------------


class FakeWebSocket:
    """Stands in for fastapi.WebSocket in connection and hub tests."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.fail_send = False
        self._incoming: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def send_text(self, data: str) -> None:
        if self.fail_send:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        if self.closed:
            raise RuntimeError("already closed")
        self.closed = True

    async def receive(self) -> dict[str, Any]:
        return await self._incoming.get()

    def feed_text(self, text: str) -> None:
        self._incoming.put_nowait({"type": "websocket.receive", "text": text})

    def feed_disconnect(self, code: int = 1000) -> None:
        self._incoming.put_nowait({"type": "websocket.disconnect", "code": code})


def make_connection(user_id: int, *, queue_size: int = 16) -> Connection:
    return Connection(FakeWebSocket(), user_id, queue_size=queue_size)  # type: ignore[arg-type]


def queued_frames(connection: Connection) -> list[dict[str, Any]]:
    """Pop everything waiting in a connection's outbound queue."""
    frames = []
    while not connection._queue.empty():
        frame = connection._queue.get_nowait()
        if frame is not None:
            frames.append(json.loads(frame))
    return frames
