"""
End-to-end tests for the message relay over REST and the WebSocket channel.
"""
import pytest
from starlette.websockets import WebSocketDisconnect


def _join(ws, room_id):
    ws.send_json({"event": "join-room", "roomId": str(room_id)})
    ack = ws.receive_json()
    assert ack == {"event": "joined", "roomId": str(room_id)}


def test_posted_message_reaches_subscriber(client, general):
    room = general["room"]
    bob_token, _ = general["bob_auth"]
    _, alice_headers = general["alice_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        _join(ws, room.id)
        created = client.post(
            "/api/messages", json={"roomId": str(room.id), "content": "hello"}, headers=alice_headers
        )
        assert created.status_code == 201

        frame = ws.receive_json()

    assert frame["event"] == "new-message"
    assert frame["roomId"] == str(room.id)
    assert frame["payload"]["id"] == created.json()["id"]
    assert frame["payload"]["content"] == "hello"
    assert frame["payload"]["user"]["name"] == "Alice"

    history = client.get(f"/api/messages?roomId={room.id}", headers=alice_headers).json()["items"]
    assert history[-1]["content"] == "hello"


def test_messages_arrive_in_post_order(client, general):
    room = general["room"]
    bob_token, _ = general["bob_auth"]
    _, alice_headers = general["alice_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        _join(ws, room.id)
        for n in range(5):
            client.post("/api/messages", json={"roomId": str(room.id), "content": f"m{n}"}, headers=alice_headers)
        received = [ws.receive_json()["payload"]["content"] for _ in range(5)]

    assert received == ["m0", "m1", "m2", "m3", "m4"]


def test_send_message_hint_is_not_pushed_twice(client, general):
    room = general["room"]
    bob_token, _ = general["bob_auth"]
    alice_token, alice_headers = general["alice_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as bob_ws, \
            client.websocket_connect(f"/api/ws?token={alice_token}") as alice_ws:
        _join(bob_ws, room.id)
        created = client.post(
            "/api/messages", json={"roomId": str(room.id), "content": "first"}, headers=alice_headers
        ).json()
        alice_ws.send_json({"event": "send-message", "roomId": str(room.id), "messageId": created["id"]})
        # A direct post over the socket follows the hint
        alice_ws.send_json({"event": "send-message", "roomId": str(room.id), "content": "second"})

        first = bob_ws.receive_json()
        second = bob_ws.receive_json()

    assert first["payload"]["content"] == "first"
    assert second["payload"]["content"] == "second"


def test_whitespace_message_is_rejected(client, general):
    room = general["room"]
    _, alice_headers = general["alice_auth"]

    response = client.post("/api/messages", json={"roomId": str(room.id), "content": "   "}, headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "EMPTY_CONTENT"
    assert client.get(f"/api/messages?roomId={room.id}", headers=alice_headers).json()["items"] == []


def test_history_limit(client, general):
    room = general["room"]
    _, alice_headers = general["alice_auth"]
    for n in range(4):
        client.post("/api/messages", json={"roomId": str(room.id), "content": f"m{n}"}, headers=alice_headers)

    items = client.get(f"/api/messages?roomId={room.id}&limit=2", headers=alice_headers).json()["items"]

    assert [m["content"] for m in items] == ["m2", "m3"]


def test_invalid_token_closes_with_4001(client):
    with client.websocket_connect("/api/ws?token=bogus") as ws:
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
    assert exc.value.code == 4001


def test_non_member_join_gets_error_and_stays_connected(client, general, make_user, make_room, login):
    carol = make_user("Carol")
    carol_room = make_room(carol, name="carol's")
    carol_token, _ = login(carol)

    with client.websocket_connect(f"/api/ws?token={carol_token}") as ws:
        ws.send_json({"event": "join-room", "roomId": str(general["room"].id)})
        error = ws.receive_json()
        # Same connection can still join a room it belongs to
        _join(ws, carol_room.id)

    assert error["event"] == "error"
    assert error["payload"]["code"] == "NOT_A_MEMBER"


def test_leave_room_stops_delivery(client, general, make_room):
    room = general["room"]
    alice = general["alice"]
    other = make_room(alice, name="other", members=[general["bob"]])
    bob_token, _ = general["bob_auth"]
    _, alice_headers = general["alice_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        _join(ws, room.id)
        _join(ws, other.id)
        ws.send_json({"event": "leave-room", "roomId": str(room.id)})
        assert ws.receive_json() == {"event": "left", "roomId": str(room.id)}

        client.post("/api/messages", json={"roomId": str(room.id), "content": "missed"}, headers=alice_headers)
        client.post("/api/messages", json={"roomId": str(other.id), "content": "seen"}, headers=alice_headers)

        frame = ws.receive_json()

    assert frame["roomId"] == str(other.id)
    assert frame["payload"]["content"] == "seen"


def test_malformed_frames_get_error_events(client, general):
    bob_token, _ = general["bob_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        ws.send_text("not json")
        invalid_json = ws.receive_json()
        ws.send_json({"event": "dance", "roomId": str(general["room"].id)})
        invalid_event = ws.receive_json()

    assert invalid_json["payload"]["code"] == "INVALID_JSON"
    assert invalid_event["payload"]["code"] == "INVALID_EVENT"


def test_disconnect_releases_registry(client, general):
    registry = client.app.state.gateway.connections
    bob_token, _ = general["bob_auth"]
    before = registry.connection_count()

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        _join(ws, general["room"].id)
        assert registry.connection_count() == before + 1

    assert registry.subscribers(general["room"].id) == []
