import pytest

from app.transport.ws_manager import WSManager


class FakeWS:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.mark.asyncio
async def test_deliver_routes_targeted_and_broadcast_events():
    wsman = WSManager()
    alice, bob = FakeWS(), FakeWS()
    await wsman.add("r1", "s-alice", alice)
    await wsman.add("r1", "s-bob", bob)

    await wsman.deliver(
        "r1",
        [
            {"type": "round_resolved", "round_number": 1},
            {"type": "room_snapshot", "me": "a", "targets": ["s-alice"]},
            {"type": "room_snapshot", "me": "b", "targets": ["s-bob"]},
        ],
        exclude_session="s-alice",
    )

    assert alice.sent == [{"type": "room_snapshot", "me": "a"}]
    assert bob.sent == [
        {"type": "round_resolved", "round_number": 1},
        {"type": "room_snapshot", "me": "b"},
    ]


@pytest.mark.asyncio
async def test_failed_send_does_not_stop_others():
    wsman = WSManager()
    dead, live = FakeWS(fail=True), FakeWS()
    await wsman.add("r1", "s-dead", dead)
    await wsman.add("r1", "s-live", live)

    await wsman.broadcast("r1", {"type": "ping"})
    assert live.sent == [{"type": "ping"}]


@pytest.mark.asyncio
async def test_remove_keeps_newer_socket_for_same_session():
    wsman = WSManager()
    old, new = FakeWS(), FakeWS()
    await wsman.add("r1", "s-alice", old)
    await wsman.add("r1", "s-alice", new)

    await wsman.remove("r1", "s-alice", old)
    assert await wsman.room_size("r1") == 1

    await wsman.remove("r1", "s-alice", new)
    assert await wsman.room_size("r1") == 0
