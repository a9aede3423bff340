from typing import Dict, List

# Decks offered to clients. Purely informational: the server accepts any vote.
CARD_SETS: Dict[str, Dict[str, object]] = {
    "fibonacci": {
        "name": "Fibonacci (Scrum)",
        "icon": "🎲",
        "values": [1, 2, 3, 5, 8, 13, 21, 34, 55, 89, "?", "∞"],
    },
    "tshirt": {
        "name": "T-Shirt Sizing",
        "icon": "👕",
        "values": ["XS", "S", "M", "L", "XL", "XXL", "?", "∞"],
    },
}

# Idle room reclamation: sweep every 30 minutes, drop empty rooms older than 1 hour.
SWEEP_INTERVAL_SECONDS: int = 30 * 60
IDLE_ROOM_MAX_AGE_SECONDS: int = 60 * 60

ROOM_CODE_LENGTH: int = 6
ROOM_CODE_ALPHABET: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Inbound event names
JOIN_ROOM = "join-room"
CAST_VOTE = "cast-vote"
REVEAL_VOTES = "reveal-votes"
RESET_VOTES = "reset-votes"
LEAVE_ROOM = "leave-room"

# Outbound event names
GAME_STATE = "game-state"
ERROR = "error"

JOIN_REQUIRED_MESSAGE = "Room ID and player name are required"

__all__: List[str] = [
    "CARD_SETS",
    "SWEEP_INTERVAL_SECONDS",
    "IDLE_ROOM_MAX_AGE_SECONDS",
    "ROOM_CODE_LENGTH",
    "ROOM_CODE_ALPHABET",
    "JOIN_ROOM",
    "CAST_VOTE",
    "REVEAL_VOTES",
    "RESET_VOTES",
    "LEAVE_ROOM",
    "GAME_STATE",
    "ERROR",
    "JOIN_REQUIRED_MESSAGE",
]
