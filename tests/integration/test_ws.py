"""End-to-end WebSocket flows against the in-process app."""
from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from chat_hub.app import create_app
from tests.conftest import (
    FakePushProvider,
    FakeUoW,
    add_channel,
    add_device,
    auth,
    make_token,
    make_uow_factory,
)


@pytest.fixture
def uow():
    return FakeUoW()


@pytest.fixture
def push():
    return FakePushProvider()


@pytest.fixture
def app(uow, push):
    return create_app(uow_factory=make_uow_factory(uow), push_provider=push)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def _connect(client: TestClient, user_id: int):
    return client.websocket_connect(f"/ws/{user_id}?token={make_token(user_id)}")


def test_rejects_invalid_token(client):
    with pytest.raises(WebSocketDisconnect) as info:
        with client.websocket_connect("/ws/1?token=garbage"):
            pass
    assert info.value.code == 4001


def test_rejects_token_for_other_user(client):
    with pytest.raises(WebSocketDisconnect) as info:
        with client.websocket_connect(f"/ws/1?token={make_token(2)}"):
            pass
    assert info.value.code == 4003


def test_peer_message_between_two_connections(client, uow):
    with _connect(client, 2) as ws_b:
        assert ws_b.receive_json()["type"] == "connection_established"
        with _connect(client, 1) as ws_a:
            assert ws_a.receive_json()["type"] == "connection_established"

            ws_a.send_json({"type": "peer", "peer_message": {"receiver_id": 2, "content": "hi"}})
            frame = ws_b.receive_json()

            assert frame["type"] == "peer"
            assert frame["peer_message"]["sender_id"] == 1
            assert frame["peer_message"]["content"] == "hi"

            ws_a.send_text("not json")
            assert ws_a.receive_json()["error"]["code"] == "invalid_payload"

    history = client.get("/api/v1/chat/messages/peer/2", headers=auth(1)).json()
    assert [m["content"] for m in history] == ["hi"]


def test_channel_post_reaches_member_who_joined_while_connected(client, uow, push):
    channel = add_channel(uow, name="ops", admins=(1,))
    add_device(uow, 2)

    with _connect(client, 1) as ws_a, _connect(client, 2) as ws_b:
        assert ws_a.receive_json()["type"] == "connection_established"
        assert ws_b.receive_json()["type"] == "connection_established"

        joined = client.post(f"/api/v1/chat/channels/{channel.id}/join", headers=auth(2))
        assert joined.status_code == 200

        ws_a.send_json(
            {"type": "channel", "channel_message": {"channel_id": channel.id, "content": "standup"}}
        )

        for ws in (ws_a, ws_b):
            frame = ws.receive_json()
            assert frame["type"] == "channel"
            assert frame["channel_message"]["content"] == "standup"

        ws_b.send_json(
            {"type": "channel", "channel_message": {"channel_id": channel.id, "content": "me too"}}
        )
        error = ws_b.receive_json()
        assert error["type"] == "error"
        assert error["error"]["code"] == "forbidden"

    assert len(uow.channel_messages._messages) == 1


def _wait_for_stats(client: TestClient, app, **expected):
    # Unregistering and subscription loading both finish after the client call returns.
    for _ in range(100):
        stats = client.portal.call(app.state.hub.stats)
        if all(getattr(stats, key) == value for key, value in expected.items()):
            return stats
        client.portal.call(asyncio.sleep, 0.01)
    raise AssertionError(f"hub stats {stats} never matched {expected}")


def test_closed_socket_is_unregistered_from_hub(client, app, uow):
    channel = add_channel(uow, name="ops", members=(2,), admins=(1,))

    with _connect(client, 1) as ws_admin:
        assert ws_admin.receive_json()["type"] == "connection_established"

        with _connect(client, 2) as ws_member:
            assert ws_member.receive_json()["type"] == "connection_established"
            _wait_for_stats(client, app, users=2, connections=2, channels=1)

        _wait_for_stats(client, app, users=1, connections=1, channels=1)

        ws_admin.send_json(
            {"type": "channel", "channel_message": {"channel_id": channel.id, "content": "gone?"}}
        )
        frame = ws_admin.receive_json()
        assert frame["channel_message"]["content"] == "gone?"

        stats = client.portal.call(app.state.hub.stats)
        assert (stats.users, stats.connections) == (1, 1)

    stats = _wait_for_stats(client, app, connections=0, channels=0)
    assert (stats.running, stats.users) == (True, 0)
    assert len(uow.channel_messages._messages) == 1
