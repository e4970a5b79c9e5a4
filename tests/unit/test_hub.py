from __future__ import annotations

import pytest
import pytest_asyncio

from chat_hub.infrastructure.ws.hub import Hub
from tests.conftest import make_connection


@pytest_asyncio.fixture
async def hub():
    hub = Hub()
    await hub.start()
    yield hub
    await hub.stop()


def _raw(conn) -> list[str]:
    frames = []
    while not conn._queue.empty():
        frame = conn._queue.get_nowait()
        if frame is not None:
            frames.append(frame)
    return frames


@pytest.mark.asyncio
async def test_broadcast_to_user_reaches_only_that_user(hub):
    a1, a2, b = make_connection(1), make_connection(1), make_connection(2)
    for conn in (a1, a2, b):
        hub.register(conn)

    hub.broadcast_to_user(1, "hello")
    await hub.wait_idle()

    assert _raw(a1) == ["hello"]
    assert _raw(a2) == ["hello"]
    assert _raw(b) == []


@pytest.mark.asyncio
async def test_broadcast_to_user_without_connections_is_noop(hub):
    hub.broadcast_to_user(99, "hello")
    await hub.wait_idle()

    stats = await hub.stats()
    assert stats.connections == 0


@pytest.mark.asyncio
async def test_channel_broadcast_includes_sender_connection(hub):
    sender, listener, outsider = make_connection(1), make_connection(2), make_connection(3)
    for conn in (sender, listener, outsider):
        hub.register(conn)
    hub.subscribe_to_channel(10, sender)
    hub.subscribe_to_channel(10, listener)

    hub.broadcast_to_channel(10, "post")
    await hub.wait_idle()

    assert _raw(sender) == ["post"]
    assert _raw(listener) == ["post"]
    assert _raw(outsider) == []


@pytest.mark.asyncio
async def test_broadcasts_keep_submission_order(hub):
    conn = make_connection(1)
    hub.register(conn)
    hub.subscribe_to_channel(10, conn)

    hub.broadcast_to_user(1, "m1")
    hub.broadcast_to_channel(10, "m2")
    hub.broadcast_to_user(1, "m3")
    await hub.wait_idle()

    assert _raw(conn) == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_unregister_removes_connection_from_channels(hub):
    conn, other = make_connection(1), make_connection(2)
    hub.register(conn)
    hub.register(other)
    hub.subscribe_to_channel(10, conn)
    hub.subscribe_to_channel(10, other)

    hub.unregister(conn)
    hub.broadcast_to_channel(10, "post")
    await hub.wait_idle()

    assert conn.closed is True
    assert _raw(conn) == []
    assert _raw(other) == ["post"]
    stats = await hub.stats()
    assert stats.users == 1
    assert stats.connections == 1


@pytest.mark.asyncio
async def test_subscribe_after_unregister_is_ignored(hub):
    conn = make_connection(1)
    hub.register(conn)
    hub.unregister(conn)
    hub.subscribe_to_channel(10, conn)
    await hub.wait_idle()

    stats = await hub.stats()
    assert stats.channels == 0
    assert stats.connections == 0


@pytest.mark.asyncio
async def test_full_queue_does_not_block_other_connections(hub):
    slow = make_connection(1, queue_size=1)
    fast = make_connection(2)
    hub.register(slow)
    hub.register(fast)
    hub.subscribe_to_channel(10, slow)
    hub.subscribe_to_channel(10, fast)

    for i in range(5):
        hub.broadcast_to_channel(10, f"m{i}")
    await hub.wait_idle()

    assert _raw(slow) == ["m0"]
    assert _raw(fast) == [f"m{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_subscribe_user_covers_every_live_connection(hub):
    a1, a2 = make_connection(1), make_connection(1)
    hub.register(a1)
    hub.register(a2)

    hub.subscribe_user(10, 1)
    hub.broadcast_to_channel(10, "post")
    await hub.wait_idle()

    assert _raw(a1) == ["post"]
    assert _raw(a2) == ["post"]


@pytest.mark.asyncio
async def test_send_to_connection_skips_unregistered(hub):
    registered, stranger = make_connection(1), make_connection(2)
    hub.register(registered)

    hub.send_to_connection(registered, "hi")
    hub.send_to_connection(stranger, "hi")
    await hub.wait_idle()

    assert _raw(registered) == ["hi"]
    assert _raw(stranger) == []


@pytest.mark.asyncio
async def test_stats_counts_users_connections_channels(hub):
    a1, a2, b = make_connection(1), make_connection(1), make_connection(2)
    for conn in (a1, a2, b):
        hub.register(conn)
    hub.subscribe_to_channel(10, a1)
    hub.subscribe_to_channel(11, b)

    stats = await hub.stats()

    assert stats.running is True
    assert (stats.users, stats.connections, stats.channels) == (2, 3, 2)


@pytest.mark.asyncio
async def test_stop_closes_all_connections():
    hub = Hub()
    await hub.start()
    a, b = make_connection(1), make_connection(2)
    hub.register(a)
    hub.register(b)

    await hub.stop()

    assert a.closed and b.closed
    assert hub.running is False
    assert (await hub.stats()).running is False


@pytest.mark.asyncio
async def test_register_after_stop_closes_connection():
    hub = Hub()
    await hub.start()
    await hub.stop()

    conn = make_connection(1)
    hub.register(conn)

    assert conn.closed is True
