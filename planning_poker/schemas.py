"""Pydantic data schemas used across the planning poker service.

Wire payloads use camelCase keys (``roomId``, ``votesRevealed``...) while the
Python attributes stay snake_case; every model shares :class:`CamelModel`'s
alias configuration so either spelling validates.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump using the camelCase aliases clients expect."""
        return self.model_dump(by_alias=True)


# -----------------------------
# Runtime
# -----------------------------

class Participant(CamelModel):
    """A connected voter inside a room. ``id`` is the connection id."""

    id: str
    name: str


class ParticipantView(CamelModel):
    id: str
    name: str
    has_voted: bool = False
    # Only populated once votes are revealed
    vote: Any = None


class GameState(CamelModel):
    """Broadcast-safe snapshot of a room."""

    id: str
    players: List[ParticipantView]
    votes: Dict[str, Any] = {}
    votes_revealed: bool = False
    all_voted: bool = False


# -----------------------------
# Inbound websocket messages
# -----------------------------

class RoomRequest(CamelModel):
    room_id: Optional[str] = None


class JoinRoomRequest(RoomRequest):
    player_name: Optional[str] = None


class CastVoteRequest(RoomRequest):
    # Any value is accepted; card sets are a client-side concern.
    vote: Any = None


# -----------------------------
# Outbound / REST responses
# -----------------------------

class ErrorMessage(CamelModel):
    message: str


class CardSet(CamelModel):
    name: str
    icon: str
    values: List[Any]


class RoomCodeResponse(CamelModel):
    room_id: str


class HealthResponse(CamelModel):
    status: str = "ok"
    rooms: int = 0


__all__ = [
    "CamelModel",
    # runtime
    "Participant",
    "ParticipantView",
    "GameState",
    # inbound
    "RoomRequest",
    "JoinRoomRequest",
    "CastVoteRequest",
    # outbound
    "ErrorMessage",
    "CardSet",
    "RoomCodeResponse",
    "HealthResponse",
]
