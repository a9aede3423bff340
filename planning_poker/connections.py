"""Tracks websocket subscriptions per room and pushes events to them."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """In-memory, single-process publish/subscribe keyed by room id.

    A connection is subscribed to at most one room at a time. Sends to one
    socket are serialized, and a room snapshot older than the last one that
    socket received is dropped, so every subscriber ends on the newest view
    even when broadcasts for the same room overlap.
    """

    def __init__(self) -> None:
        self._sockets: Dict[str, WebSocket] = {}
        self._send_locks: Dict[str, asyncio.Lock] = {}
        self._room_of: Dict[str, str] = {}
        self._subscribers: Dict[str, Dict[str, WebSocket]] = {}
        # connection id -> revision of the last snapshot of its room it was sent
        self._delivered: Dict[str, int] = {}

    # -------------------- Connection bookkeeping -------------------- #

    def register(self, conn_id: str, websocket: WebSocket) -> None:
        self._sockets[conn_id] = websocket
        self._send_locks[conn_id] = asyncio.Lock()

    def unregister(self, conn_id: str) -> None:
        self.unsubscribe(conn_id)
        self._sockets.pop(conn_id, None)
        self._send_locks.pop(conn_id, None)

    def subscribe(self, conn_id: str, room_id: str) -> None:
        """Subscribe *conn_id* to *room_id*, dropping any previous subscription."""
        websocket = self._sockets.get(conn_id)
        if websocket is None:
            return
        if self._room_of.get(conn_id) == room_id:
            return
        self.unsubscribe(conn_id)
        self._subscribers.setdefault(room_id, {})[conn_id] = websocket
        self._room_of[conn_id] = room_id

    def unsubscribe(self, conn_id: str) -> None:
        self._delivered.pop(conn_id, None)
        room_id = self._room_of.pop(conn_id, None)
        if room_id is None:
            return
        subscribers = self._subscribers.get(room_id)
        if subscribers is None:
            return
        subscribers.pop(conn_id, None)
        if not subscribers:
            self._subscribers.pop(room_id, None)

    def room_of(self, conn_id: str) -> Optional[str]:
        return self._room_of.get(conn_id)

    def subscribers(self, room_id: str) -> List[str]:
        return list(self._subscribers.get(room_id, {}))

    # -------------------- Delivery -------------------- #

    async def _deliver(
        self,
        conn_id: str,
        websocket: WebSocket,
        payload: Dict[str, Any],
        room_id: Optional[str] = None,
        revision: Optional[int] = None,
    ) -> bool:
        lock = self._send_locks.get(conn_id)
        if lock is None:
            return False
        async with lock:
            if room_id is not None:
                if self._room_of.get(conn_id) != room_id:
                    # Left the room while this broadcast was in flight.
                    return False
                if revision is not None and revision <= self._delivered.get(conn_id, -1):
                    # A newer snapshot of the room already went out on this socket.
                    return False
            try:
                await websocket.send_json(payload)
            except Exception:
                logger.warning("Failed to deliver %s to %s", payload.get("type"), conn_id, exc_info=True)
                return False
            if room_id is not None and revision is not None:
                self._delivered[conn_id] = revision
        return True

    async def send(self, conn_id: str, payload: Dict[str, Any]) -> bool:
        websocket = self._sockets.get(conn_id)
        if websocket is None:
            return False
        return await self._deliver(conn_id, websocket, payload)

    async def broadcast(
        self, room_id: str, payload: Dict[str, Any], revision: Optional[int] = None
    ) -> int:
        """Send *payload* to every subscriber of *room_id*.

        *revision* is the room revision the payload was projected at; stale
        revisions are skipped per socket. A failing socket is logged and
        skipped; the rest still get the event. Returns the number of
        successful deliveries.
        """
        delivered = 0
        for conn_id, websocket in list(self._subscribers.get(room_id, {}).items()):
            if await self._deliver(conn_id, websocket, payload, room_id, revision):
                delivered += 1
        return delivered


__all__ = ["ConnectionManager"]
