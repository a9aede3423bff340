"""Client event handlers for planning poker rooms.

Every handler follows the same protocol: look the room up, apply one mutation
while holding that room's lock, take a :meth:`Room.project_view` snapshot,
release the lock and only then publish the snapshot to the room's
subscribers. Events that reference a missing room or a non-member are
dropped without a broadcast.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import ValidationError

from .connections import ConnectionManager
from .constants import (
    CAST_VOTE,
    ERROR,
    GAME_STATE,
    JOIN_REQUIRED_MESSAGE,
    JOIN_ROOM,
    LEAVE_ROOM,
    RESET_VOTES,
    REVEAL_VOTES,
)
from .registry import RoomRegistry, normalize_room_id
from .room import Room
from .schemas import CastVoteRequest, ErrorMessage, GameState, JoinRoomRequest, RoomRequest

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=RoomRequest)


def _parse(model: Type[RequestT], data: Any) -> Optional[RequestT]:
    try:
        return model.model_validate(data)
    except ValidationError:
        return None


async def publish_state(connections: ConnectionManager, state: GameState, revision: int) -> None:
    await connections.broadcast(state.id, {"type": GAME_STATE, "data": state.to_wire()}, revision)


async def send_error(connections: ConnectionManager, conn_id: str, message: str) -> None:
    await connections.send(conn_id, {"type": ERROR, "data": ErrorMessage(message=message).to_wire()})


def _existing_room(registry: RoomRegistry, room_id: Optional[str]) -> Optional[Room]:
    if not room_id:
        return None
    return registry.get(room_id)


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

async def handle_join_room(
    registry: RoomRegistry, connections: ConnectionManager, conn_id: str, data: Any
) -> None:
    req = _parse(JoinRoomRequest, data)
    room_id = normalize_room_id(req.room_id or "") if req else ""
    player_name = (req.player_name or "").strip() if req else ""
    if not room_id or not player_name:
        logger.warning("Rejected join from %s: missing room id or player name", conn_id)
        await send_error(connections, conn_id, JOIN_REQUIRED_MESSAGE)
        return

    # A connection lives in one room at a time.
    previous = connections.room_of(conn_id)
    if previous is not None and previous != room_id:
        await handle_leave(registry, connections, conn_id)

    while True:
        room = registry.get_or_create(room_id)
        async with room.lock:
            # The sweeper may have reclaimed this room before we got the lock.
            if not registry.is_registered(room):
                continue
            room.join(conn_id, player_name)
            # Subscribed before the lock drops so no later snapshot can miss us.
            connections.subscribe(conn_id, room.id)
            state = room.project_view()
            revision = room.revision
        break

    logger.info("Player %s joined room %s", player_name, room.id)
    await publish_state(connections, state, revision)


async def handle_leave(registry: RoomRegistry, connections: ConnectionManager, conn_id: str) -> None:
    """Remove *conn_id* from whichever room it is in and reclaim the room if empty."""
    room_id = connections.room_of(conn_id)
    connections.unsubscribe(conn_id)
    if room_id is None:
        return
    room = registry.get(room_id)
    if room is None:
        return

    async with room.lock:
        if not room.leave(conn_id):
            return
        state = room.project_view()
        revision = room.revision
        registry.remove_if_empty(room.id)

    logger.info("Connection %s left room %s", conn_id, room.id)
    await publish_state(connections, state, revision)


# ---------------------------------------------------------------------------
# Voting round
# ---------------------------------------------------------------------------

async def handle_cast_vote(
    registry: RoomRegistry, connections: ConnectionManager, conn_id: str, data: Any
) -> None:
    req = _parse(CastVoteRequest, data)
    room = _existing_room(registry, req.room_id if req else None)
    if req is None or room is None:
        logger.debug("Ignoring vote from %s for unknown room", conn_id)
        return

    async with room.lock:
        if not room.cast_vote(conn_id, req.vote):
            logger.debug("Ignoring vote from non-member %s in room %s", conn_id, room.id)
            return
        state = room.project_view()
        revision = room.revision

    await publish_state(connections, state, revision)


async def handle_reveal_votes(
    registry: RoomRegistry, connections: ConnectionManager, conn_id: str, data: Any
) -> None:
    req = _parse(RoomRequest, data)
    room = _existing_room(registry, req.room_id if req else None)
    if room is None:
        logger.debug("Ignoring reveal from %s for unknown room", conn_id)
        return

    async with room.lock:
        room.reveal()
        state = room.project_view()
        revision = room.revision

    await publish_state(connections, state, revision)


async def handle_reset_votes(
    registry: RoomRegistry, connections: ConnectionManager, conn_id: str, data: Any
) -> None:
    req = _parse(RoomRequest, data)
    room = _existing_room(registry, req.room_id if req else None)
    if room is None:
        logger.debug("Ignoring reset from %s for unknown room", conn_id)
        return

    async with room.lock:
        room.reset()
        state = room.project_view()
        revision = room.revision

    await publish_state(connections, state, revision)


# ---------------------------------------------------------------------------
# Primary dispatcher used by websocket endpoint
# ---------------------------------------------------------------------------

async def handle_ws_message(
    registry: RoomRegistry, connections: ConnectionManager, conn_id: str, data: Any
) -> None:
    msg_type = data.get("type") if isinstance(data, dict) else None
    if msg_type == JOIN_ROOM:
        await handle_join_room(registry, connections, conn_id, data)
    elif msg_type == CAST_VOTE:
        await handle_cast_vote(registry, connections, conn_id, data)
    elif msg_type == REVEAL_VOTES:
        await handle_reveal_votes(registry, connections, conn_id, data)
    elif msg_type == RESET_VOTES:
        await handle_reset_votes(registry, connections, conn_id, data)
    elif msg_type == LEAVE_ROOM:
        await handle_leave(registry, connections, conn_id)
    else:
        logger.warning("Ignoring unknown message type %r from %s", msg_type, conn_id)


__all__ = [
    "handle_ws_message",
    "handle_join_room",
    "handle_leave",
    "handle_cast_vote",
    "handle_reveal_votes",
    "handle_reset_votes",
    "publish_state",
    "send_error",
]
