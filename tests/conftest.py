import asyncio

import pytest
from fastapi.testclient import TestClient

from planning_poker.app import create_app
from planning_poker.config import Settings
from planning_poker.connections import ConnectionManager
from planning_poker.registry import RoomRegistry


class FakeSocket:
    """Stands in for a websocket; records every JSON payload it is sent."""

    def __init__(self, fail=False, delays=None):
        self.sent = []
        self.fail = fail
        # event-loop ticks each successive send takes to complete
        self.delays = list(delays or [])

    async def send_json(self, payload):
        for _ in range(self.delays.pop(0) if self.delays else 0):
            await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)

    def states(self):
        return [m["data"] for m in self.sent if m["type"] == "game-state"]


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def connections():
    return ConnectionManager()


@pytest.fixture
def connect(connections):
    def _connect(conn_id, fail=False, delays=None):
        sock = FakeSocket(fail=fail, delays=delays)
        connections.register(conn_id, sock)
        return sock

    return _connect


@pytest.fixture
def client():
    app = create_app(Settings(sweep_interval_seconds=3600, idle_room_max_age_seconds=3600))
    with TestClient(app) as c:
        yield c
