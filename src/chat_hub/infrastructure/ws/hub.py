"""Serialized coordinator for connection lifecycle and message fan-out."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from chat_hub.domain.value_objects.ids import ChannelId, UserId
from chat_hub.infrastructure.ws.connection import Connection
from chat_hub.infrastructure.ws.directory import MembershipDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HubStats:
    running: bool
    users: int
    connections: int
    channels: int


@dataclass(frozen=True, slots=True)
class _Register:
    connection: Connection


@dataclass(frozen=True, slots=True)
class _Unregister:
    connection: Connection


@dataclass(frozen=True, slots=True)
class _Subscribe:
    channel_id: ChannelId
    connection: Connection


@dataclass(frozen=True, slots=True)
class _SubscribeUser:
    channel_id: ChannelId
    user_id: UserId


@dataclass(frozen=True, slots=True)
class _BroadcastToUser:
    user_id: UserId
    frame: str


@dataclass(frozen=True, slots=True)
class _BroadcastToChannel:
    channel_id: ChannelId
    frame: str


@dataclass(frozen=True, slots=True)
class _Deliver:
    connection: Connection
    frame: str


@dataclass(frozen=True, slots=True)
class _Snapshot:
    result: asyncio.Future[HubStats]


@dataclass(frozen=True, slots=True)
class _Stop:
    pass


_Event = (
    _Register
    | _Unregister
    | _Subscribe
    | _SubscribeUser
    | _BroadcastToUser
    | _BroadcastToChannel
    | _Deliver
    | _Snapshot
    | _Stop
)


class Hub:
    """Owns the membership directory and applies every operation on it.

    Public operations never block: they put an event on the hub's queue and
    return. A single coordination task applies events one at a time in
    arrival order, so the directory needs no lock. Enqueueing a frame on a
    connection never blocks either; a full or closed connection just misses
    the frame.
    """

    def __init__(self) -> None:
        self._directory = MembershipDirectory()
        self._events: asyncio.Queue[_Event] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stopping = False
        self._task = asyncio.create_task(self._run(), name="chat-hub")
        logger.info("Hub started")

    async def stop(self) -> None:
        """Apply already queued events, then close every connection."""
        if self._task is None:
            return
        self._stopping = True
        self._events.put_nowait(_Stop())
        await self._task
        self._task = None
        logger.info("Hub stopped")

    # -- operations -------------------------------------------------------

    def register(self, connection: Connection) -> None:
        self._submit(_Register(connection))

    def unregister(self, connection: Connection) -> None:
        self._submit(_Unregister(connection))

    def subscribe_to_channel(self, channel_id: int, connection: Connection) -> None:
        self._submit(_Subscribe(ChannelId(channel_id), connection))

    def subscribe_user(self, channel_id: int, user_id: int) -> None:
        """Subscribe every live connection of user_id to channel_id."""
        self._submit(_SubscribeUser(ChannelId(channel_id), UserId(user_id)))

    def broadcast_to_user(self, user_id: int, frame: str) -> None:
        self._submit(_BroadcastToUser(UserId(user_id), frame))

    def broadcast_to_channel(self, channel_id: int, frame: str) -> None:
        self._submit(_BroadcastToChannel(ChannelId(channel_id), frame))

    def send_to_connection(self, connection: Connection, frame: str) -> None:
        """Deliver a frame to one connection after all previously queued events."""
        self._submit(_Deliver(connection, frame))

    async def stats(self) -> HubStats:
        if not self.running or self._stopping:
            return HubStats(running=False, users=0, connections=0, channels=0)
        result: asyncio.Future[HubStats] = asyncio.get_running_loop().create_future()
        self._submit(_Snapshot(result))
        return await result

    async def wait_idle(self) -> None:
        """Wait until every event queued so far has been applied."""
        await self._events.join()

    def _submit(self, event: _Event) -> None:
        if self._stopping:
            if isinstance(event, _Register):
                event.connection.close()
            logger.debug("Hub stopping, ignoring %s", type(event).__name__)
            return
        self._events.put_nowait(event)

    # -- coordination loop ----------------------------------------------

    async def _run(self) -> None:
        while True:
            event = await self._events.get()
            try:
                if isinstance(event, _Stop):
                    self._close_all()
                    return
                self._apply(event)
            except Exception:
                logger.exception("Hub failed to apply %s", type(event).__name__)
            finally:
                self._events.task_done()

    def _apply(self, event: _Event) -> None:
        directory = self._directory
        if isinstance(event, _Register):
            if event.connection.closed:
                return
            if directory.add(event.connection):
                logger.debug("Registered %r (users=%d)", event.connection, directory.user_count)

        elif isinstance(event, _Unregister):
            directory.remove(event.connection)
            event.connection.close()
            logger.debug("Unregistered %r", event.connection)

        elif isinstance(event, _Subscribe):
            if not directory.subscribe(event.channel_id, event.connection):
                logger.debug("Skipping subscribe of unregistered %r", event.connection)

        elif isinstance(event, _SubscribeUser):
            for conn in directory.connections_for_user(event.user_id):
                directory.subscribe(event.channel_id, conn)

        elif isinstance(event, _BroadcastToUser):
            self._fan_out(directory.connections_for_user(event.user_id), event.frame)

        elif isinstance(event, _BroadcastToChannel):
            self._fan_out(directory.subscribers(event.channel_id), event.frame)

        elif isinstance(event, _Deliver):
            if event.connection in directory:
                event.connection.enqueue(event.frame)

        elif isinstance(event, _Snapshot):
            if not event.result.done():
                event.result.set_result(
                    HubStats(
                        running=True,
                        users=directory.user_count,
                        connections=directory.connection_count,
                        channels=directory.channel_count,
                    )
                )

    @staticmethod
    def _fan_out(connections: list[Connection], frame: str) -> None:
        dropped = 0
        for conn in connections:
            if not conn.enqueue(frame):
                dropped += 1
        if dropped:
            logger.debug("Dropped frame for %d of %d connections", dropped, len(connections))

    def _close_all(self) -> None:
        connections = self._directory.all_connections()
        for conn in connections:
            conn.close()
        self._directory.clear()
        logger.info("Closed %d connections", len(connections))
