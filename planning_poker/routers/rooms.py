from __future__ import annotations

import secrets
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from ..constants import CARD_SETS, ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
from ..registry import RoomRegistry
from ..schemas import CardSet, GameState, HealthResponse, RoomCodeResponse

router = APIRouter(prefix="", tags=["rooms"])


def get_registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


def generate_room_code(registry: RoomRegistry) -> str:
    """Random upper-case code that no live room is using yet."""
    while True:
        code = "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
        if code not in registry:
            return code


@router.post("/rooms", response_model=RoomCodeResponse)
async def create_room_code(registry: RoomRegistry = Depends(get_registry)):
    # The room itself is created lazily by the first join-room event.
    return RoomCodeResponse(room_id=generate_room_code(registry))


@router.get("/rooms/{room_id}", response_model=GameState)
async def get_room(room_id: str, registry: RoomRegistry = Depends(get_registry)):
    room = registry.get(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    async with room.lock:
        return room.project_view()


@router.get("/card-sets", response_model=Dict[str, CardSet])
async def list_card_sets():
    return {key: CardSet.model_validate(card_set) for key, card_set in CARD_SETS.items()}


@router.get("/health", response_model=HealthResponse)
async def health(registry: RoomRegistry = Depends(get_registry)):
    return HealthResponse(rooms=len(registry))
