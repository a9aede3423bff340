from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List, Optional

from .schemas import GameState, Participant, ParticipantView

# NOTE: ``Room`` never talks to sockets. Handlers mutate it under ``lock``,
# take a ``project_view()`` snapshot and broadcast after releasing the lock.


class Room:
    """Authoritative state of one voting session.

    The room is either *hidden* (votes collected but not disclosed) or
    *revealed*. It starts hidden and cycles between the two until the
    registry reclaims it.
    """

    def __init__(self, room_id: str, created_at: Optional[float] = None):
        self.id = room_id
        # connection id -> participant, in join order
        self.participants: Dict[str, Participant] = {}
        # connection id -> opaque vote value; keys are always a subset of participants
        self.votes: Dict[str, Any] = {}
        self.revealed: bool = False
        self.created_at: float = time.time() if created_at is None else created_at
        self.lock = asyncio.Lock()
        # bumped by every effective mutation; orders the snapshots sent to subscribers
        self.revision: int = 0

    # ---------------------------------------------------------------------
    # Helper utilities
    # ---------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.participants

    def all_voted(self) -> bool:
        """*True* when the room has participants and every one of them voted."""
        return bool(self.participants) and all(pid in self.votes for pid in self.participants)

    # -------------------- Participant management -------------------- #

    def join(self, conn_id: str, name: str) -> Participant:
        """Add (or overwrite) the participant for *conn_id*.

        A re-join drops whatever vote that connection had cast before.
        """
        if not conn_id or not name:
            raise ValueError("connection id and name are required")
        participant = Participant(id=conn_id, name=name)
        self.participants[conn_id] = participant
        self.revision += 1
        self.votes.pop(conn_id, None)
        return participant

    def leave(self, conn_id: str) -> bool:
        """Remove *conn_id* and its vote. Returns *False* if it was not a member."""
        removed = self.participants.pop(conn_id, None)
        if removed is None:
            return False
        self.votes.pop(conn_id, None)
        self.revision += 1
        return True

    # -------------------- Voting -------------------- #

    def cast_vote(self, conn_id: str, value: Any) -> bool:
        """Record *value* for *conn_id*; votes from non-members are dropped."""
        if conn_id not in self.participants:
            return False
        self.votes[conn_id] = value
        self.revision += 1
        return True

    def reveal(self) -> None:
        self.revealed = True
        self.revision += 1

    def reset(self) -> None:
        self.votes.clear()
        self.revealed = False
        self.revision += 1

    # -------------------- View projection -------------------- #

    def project_view(self) -> GameState:
        """Snapshot of the room that is safe to send to every subscriber.

        While hidden, neither ``players[].vote`` nor ``votes`` carry any
        value, so nothing about a vote (not even its type) leaks.
        """
        players: List[ParticipantView] = []
        for pid, participant in self.participants.items():
            has_voted = pid in self.votes
            players.append(
                ParticipantView(
                    id=pid,
                    name=participant.name,
                    has_voted=has_voted,
                    vote=self.votes[pid] if self.revealed and has_voted else None,
                )
            )

        return GameState(
            id=self.id,
            players=players,
            votes=dict(self.votes) if self.revealed else {},
            votes_revealed=self.revealed,
            all_voted=self.all_voted(),
        )


__all__ = ["Room"]
