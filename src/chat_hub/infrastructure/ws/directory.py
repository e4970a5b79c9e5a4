"""In-memory index of live connections by user and by channel."""
from __future__ import annotations

from chat_hub.infrastructure.ws.connection import Connection


class MembershipDirectory:
    """Derived cache of who is connected and which channels they listen on.

    Not thread-safe and not task-safe: the Hub is its only writer. A
    connection can only be subscribed to channels while it is registered,
    so no channel subscriber set ever holds an unregistered connection.
    """

    def __init__(self) -> None:
        self._by_user: dict[int, set[Connection]] = {}
        self._by_channel: dict[int, set[Connection]] = {}
        self._channels_of: dict[Connection, set[int]] = {}

    def __contains__(self, connection: object) -> bool:
        return connection in self._channels_of

    @property
    def user_count(self) -> int:
        return len(self._by_user)

    @property
    def connection_count(self) -> int:
        return len(self._channels_of)

    @property
    def channel_count(self) -> int:
        return len(self._by_channel)

    def add(self, connection: Connection) -> bool:
        if connection in self._channels_of:
            return False
        self._channels_of[connection] = set()
        self._by_user.setdefault(connection.user_id, set()).add(connection)
        return True

    def remove(self, connection: Connection) -> bool:
        channel_ids = self._channels_of.pop(connection, None)
        conns = self._by_user.get(connection.user_id)
        if conns is not None:
            conns.discard(connection)
            if not conns:
                del self._by_user[connection.user_id]
        for channel_id in channel_ids or ():
            subs = self._by_channel.get(channel_id)
            if subs is None:
                continue
            subs.discard(connection)
            if not subs:
                del self._by_channel[channel_id]
        return channel_ids is not None

    def subscribe(self, channel_id: int, connection: Connection) -> bool:
        channel_ids = self._channels_of.get(connection)
        if channel_ids is None:
            return False
        channel_ids.add(channel_id)
        self._by_channel.setdefault(channel_id, set()).add(connection)
        return True

    def connections_for_user(self, user_id: int) -> list[Connection]:
        return list(self._by_user.get(user_id, ()))

    def subscribers(self, channel_id: int) -> list[Connection]:
        return list(self._by_channel.get(channel_id, ()))

    def channels_of(self, connection: Connection) -> frozenset[int]:
        return frozenset(self._channels_of.get(connection, ()))

    def all_connections(self) -> list[Connection]:
        return list(self._channels_of)

    def clear(self) -> None:
        self._by_user.clear()
        self._by_channel.clear()
        self._channels_of.clear()
