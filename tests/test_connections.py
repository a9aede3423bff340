"""
Tests for subscription bookkeeping and ordered delivery.
"""
import asyncio


def state(revision):
    return {"type": "game-state", "data": {"rev": revision}}


def test_older_room_snapshot_is_dropped(connections, connect):
    alice = connect("alice")
    connections.subscribe("alice", "R1")

    asyncio.run(connections.broadcast("R1", state(2), revision=2))
    delivered = asyncio.run(connections.broadcast("R1", state(1), revision=1))

    assert delivered == 0
    assert alice.states() == [{"rev": 2}]


def test_sends_to_one_socket_are_serialized(connections, connect):
    alice = connect("alice", delays=[4, 0])
    connections.subscribe("alice", "R1")

    async def scenario():
        await asyncio.gather(
            connections.broadcast("R1", state(1), revision=1),
            connections.broadcast("R1", state(2), revision=2),
        )

    asyncio.run(scenario())
    assert alice.states() == [{"rev": 1}, {"rev": 2}]


def test_resubscribing_to_same_room_keeps_ordering(connections, connect):
    alice = connect("alice")
    connections.subscribe("alice", "R1")
    asyncio.run(connections.broadcast("R1", state(3), revision=3))

    connections.subscribe("alice", "R1")
    asyncio.run(connections.broadcast("R1", state(2), revision=2))

    assert alice.states() == [{"rev": 3}]


def test_moving_rooms_resets_revision_tracking(connections, connect):
    alice = connect("alice")
    connections.subscribe("alice", "R1")
    asyncio.run(connections.broadcast("R1", state(7), revision=7))

    connections.subscribe("alice", "R2")
    asyncio.run(connections.broadcast("R2", state(1), revision=1))
    asyncio.run(connections.broadcast("R1", state(8), revision=8))

    assert connections.room_of("alice") == "R2"
    assert connections.subscribers("R1") == []
    assert alice.states() == [{"rev": 7}, {"rev": 1}]


def test_direct_send_ignores_room_revisions(connections, connect):
    alice = connect("alice")
    connections.subscribe("alice", "R1")
    asyncio.run(connections.broadcast("R1", state(5), revision=5))

    assert asyncio.run(connections.send("alice", {"type": "error", "data": {"message": "x"}})) is True
    assert asyncio.run(connections.send("nobody", {"type": "error", "data": {}})) is False
    assert alice.sent[-1]["type"] == "error"
