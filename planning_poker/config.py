"""Runtime configuration loaded from the environment (and an optional ``.env``)."""
from __future__ import annotations

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import IDLE_ROOM_MAX_AGE_SECONDS, SWEEP_INTERVAL_SECONDS

load_dotenv()


class Settings(BaseModel):
    """Server settings. Construct directly in tests, use :meth:`from_env` otherwise."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    log_file: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS
    idle_room_max_age_seconds: float = IDLE_ROOM_MAX_AGE_SECONDS

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("POKER_HOST", "0.0.0.0"),
            port=int(os.getenv("POKER_PORT", "3001")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            sweep_interval_seconds=float(
                os.getenv("ROOM_SWEEP_INTERVAL_SECONDS", str(SWEEP_INTERVAL_SECONDS))
            ),
            idle_room_max_age_seconds=float(
                os.getenv("ROOM_IDLE_MAX_AGE_SECONDS", str(IDLE_ROOM_MAX_AGE_SECONDS))
            ),
        )


__all__ = ["Settings"]
