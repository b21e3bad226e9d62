import asyncio
import json
import pytest
from app.realtime.rooms import RoomManager, RoomConnection
from app.config.constants import EMPTY_ROOM


class FakeWebSocket:
    def __init__(self):
        self.sent = []

    async def send_text(self, text):
        self.sent.append(json.loads(text))


class BrokenWebSocket:
    async def send_text(self, text):
        raise RuntimeError("connection reset")


class StalledWebSocket:
    def __init__(self):
        self.release = asyncio.Event()
        self.sent = []

    async def send_text(self, text):
        await self.release.wait()
        self.sent.append(json.loads(text))


def _connect(manager, user_id, room_id, websocket=None):
    connection = RoomConnection(websocket=websocket or FakeWebSocket(), user_id=user_id, room_id=room_id)
    manager.join(connection)
    return connection


def _frame(match_id, frame_type="chat_message", **payload):
    return json.dumps({"type": frame_type, "matchId": match_id, **payload})


@pytest.mark.asyncio
async def test_relay_reaches_room_peers_without_echo():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)

    relayed = manager.handle_frame(alice, _frame(7, content="hello", senderId="alice"))
    await manager.drain()

    assert relayed == 1
    assert alice.websocket.sent == []
    [received] = bob.websocket.sent
    assert received["type"] == "chat_message"
    assert received["matchId"] == 7
    assert received["content"] == "hello"
    assert received["senderId"] == "alice"
    assert isinstance(received["serverTimestamp"], int)


@pytest.mark.asyncio
async def test_relay_reaches_every_other_connection_in_room():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob_phone = _connect(manager, "bob", 7)
    bob_laptop = _connect(manager, "bob", 7)

    assert manager.handle_frame(alice, _frame(7, frame_type="typing_start")) == 2
    await manager.drain()

    assert len(bob_phone.websocket.sent) == 1
    assert len(bob_laptop.websocket.sent) == 1


@pytest.mark.asyncio
async def test_frame_for_other_room_is_dropped():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)
    mallory_target = _connect(manager, "carol", 8)

    assert manager.handle_frame(alice, _frame(8, content="sneaky")) == 0
    await manager.drain()

    assert bob.websocket.sent == []
    assert mallory_target.websocket.sent == []


@pytest.mark.asyncio
async def test_empty_room_never_relays():
    manager = RoomManager()
    anonymous = _connect(manager, "", EMPTY_ROOM)
    other_anonymous = _connect(manager, "", EMPTY_ROOM)

    assert not anonymous.authenticated
    assert manager.handle_frame(anonymous, _frame(EMPTY_ROOM)) == 0
    assert manager.broadcast(EMPTY_ROOM, {"type": "chat_message"}) == 0
    await manager.drain()
    assert other_anonymous.websocket.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [
    "not json",
    "[1, 2, 3]",
    json.dumps({"matchId": 7, "content": "no type"}),
    json.dumps({"type": "chat_message", "content": "no room"}),
    json.dumps({"type": "chat_message", "matchId": "7"}),
    json.dumps({"type": "chat_message", "matchId": True}),
    json.dumps({"type": "connection_ack", "matchId": 7}),
    json.dumps({"type": "delete_everything", "matchId": 7}),
])
async def test_invalid_frames_are_dropped(raw):
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)

    assert manager.handle_frame(alice, raw) == 0
    await manager.drain()
    assert bob.websocket.sent == []


@pytest.mark.asyncio
async def test_leave_removes_connection():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)

    manager.leave(bob)
    manager.leave(bob)  # idempotent

    assert manager.handle_frame(alice, _frame(7)) == 0
    assert manager.members(7) == {alice}
    manager.leave(alice)
    assert 7 not in manager.rooms
    assert manager.connection_count() == 0


@pytest.mark.asyncio
async def test_failed_send_evicts_only_that_peer():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    broken = _connect(manager, "bob", 7, websocket=BrokenWebSocket())
    healthy = _connect(manager, "bob", 7)

    manager.handle_frame(alice, _frame(7))
    await manager.drain()

    assert len(healthy.websocket.sent) == 1
    assert broken not in manager.members(7)
    assert healthy in manager.members(7)


@pytest.mark.asyncio
async def test_stalled_peer_does_not_block_others():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    stalled = _connect(manager, "bob", 7, websocket=StalledWebSocket())
    healthy = _connect(manager, "bob", 7)

    manager.handle_frame(alice, _frame(7, content="first"))
    # Let the scheduled sends run without releasing the stalled peer
    for _ in range(5):
        await asyncio.sleep(0)

    assert [f["content"] for f in healthy.websocket.sent] == ["first"]
    assert stalled.websocket.sent == []

    stalled.websocket.release.set()
    await manager.drain()
    assert [f["content"] for f in stalled.websocket.sent] == ["first"]


@pytest.mark.asyncio
async def test_leave_during_broadcast_is_tolerated():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)

    manager.handle_frame(alice, _frame(7))
    # Disconnect before the scheduled send runs
    manager.leave(bob)
    await manager.drain()

    assert manager.members(7) == {alice}


@pytest.mark.asyncio
async def test_peer_stalled_past_timeout_is_evicted():
    manager = RoomManager(send_timeout=0.05)
    alice = _connect(manager, "alice", 7)
    stalled = _connect(manager, "bob", 7, websocket=StalledWebSocket())
    healthy = _connect(manager, "bob", 7)

    manager.handle_frame(alice, _frame(7, content="first"))
    await manager.drain()

    assert stalled not in manager.members(7)
    assert healthy in manager.members(7)
    assert stalled.websocket.sent == []

    # Later frames are no longer scheduled for the stalled peer
    assert manager.handle_frame(alice, _frame(7, content="second")) == 1
    await manager.drain()
    assert [f["content"] for f in healthy.websocket.sent] == ["first", "second"]


@pytest.mark.asyncio
async def test_evicted_connection_cannot_relay():
    manager = RoomManager()
    alice = _connect(manager, "alice", 7)
    bob = _connect(manager, "bob", 7)

    manager.leave(alice)

    assert manager.handle_frame(alice, _frame(7, content="still here?")) == 0
    await manager.drain()
    assert bob.websocket.sent == []
