"""Process-wide room registry and the idle-room sweeper.

One :class:`RoomRegistry` is built per application (see ``app.create_app``)
and handed to the event handlers; nothing here is a module-level singleton,
so tests can construct a fresh registry whenever they need one.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, List, Optional

from .room import Room

logger = logging.getLogger(__name__)


def normalize_room_id(room_id: str) -> str:
    """Canonical form of a room code: surrounding whitespace stripped, upper-cased."""
    return room_id.strip().upper()


class RoomRegistry:
    """Maps normalized room ids to :class:`Room` instances.

    The registry is the only component that creates or deletes rooms. It
    never broadcasts; callers publish the new view after mutating a room.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return isinstance(room_id, str) and normalize_room_id(room_id) in self._rooms

    def get_or_create(self, room_id: str) -> Room:
        key = normalize_room_id(room_id)
        room = self._rooms.get(key)
        if room is None:
            room = Room(key)
            self._rooms[key] = room
            logger.info("Created room %s", key)
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(normalize_room_id(room_id))

    def is_registered(self, room: Room) -> bool:
        """*True* while *room* is still the entry stored under its id."""
        return self._rooms.get(room.id) is room

    def remove_if_empty(self, room_id: str) -> bool:
        """Drop the room if it has no participants left. Call after every removal."""
        key = normalize_room_id(room_id)
        room = self._rooms.get(key)
        if room is None or not room.is_empty():
            return False
        del self._rooms[key]
        logger.info("Removed empty room %s", key)
        return True

    async def sweep_idle(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """Delete empty rooms created more than *max_age* seconds before *now*.

        Each room's lock is held while it is inspected so a room that is
        concurrently gaining its first participant is never dropped. Rooms
        with participants survive regardless of age.
        """
        if now is None:
            now = time.time()
        removed: List[str] = []
        for room in list(self._rooms.values()):
            async with room.lock:
                if not self.is_registered(room):
                    continue
                if room.is_empty() and now - room.created_at > max_age:
                    del self._rooms[room.id]
                    removed.append(room.id)
                    logger.info("Cleaned up old room: %s", room.id)
        return removed


async def run_idle_sweeper(registry: RoomRegistry, interval: float, max_age: float) -> None:
    """Background housekeeping loop; runs until cancelled."""
    logger.info("Idle room sweeper started (every %ss, threshold %ss)", interval, max_age)
    try:
        while True:
            await asyncio.sleep(interval)
            removed = await registry.sweep_idle(max_age)
            if removed:
                logger.info("Sweep reclaimed %d idle room(s)", len(removed))
    except asyncio.CancelledError:
        logger.info("Idle room sweeper stopped")
        raise


__all__ = ["RoomRegistry", "normalize_room_id", "run_idle_sweeper"]
