from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .connections import ConnectionManager
from .registry import RoomRegistry, run_idle_sweeper
from .routers import rooms as rooms_router
from .routers import websockets as ws_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app with a fresh registry and connection manager."""
    settings = settings or Settings.from_env()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(
            run_idle_sweeper(
                app.state.registry,
                interval=settings.sweep_interval_seconds,
                max_age=settings.idle_room_max_age_seconds,
            )
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(title="Planning Poker", lifespan=lifespan)
    app.state.settings = settings
    app.state.registry = RoomRegistry()
    app.state.connections = ConnectionManager()

    # -----------------------------
    # Middleware & routers
    # -----------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router.router)
    app.include_router(ws_router.router)

    logger.info("Planning poker application initialized")
    return app


__all__ = ["create_app"]
