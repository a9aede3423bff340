from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..connections import ConnectionManager
from ..registry import RoomRegistry
from ..voting import handle_leave, handle_ws_message

router = APIRouter(prefix="", tags=["ws"])

logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    registry: RoomRegistry = ws.app.state.registry
    connections: ConnectionManager = ws.app.state.connections

    await ws.accept()
    conn_id = uuid.uuid4().hex
    connections.register(conn_id, ws)
    logger.info("User connected: %s", conn_id)

    try:
        while True:
            try:
                data = await ws.receive_json()
            except ValueError:
                logger.warning("Ignoring malformed frame from %s", conn_id)
                continue
            await handle_ws_message(registry, connections, conn_id, data)
    except WebSocketDisconnect:
        logger.info("User disconnected: %s", conn_id)
    except Exception:
        logger.exception("WebSocket error on %s", conn_id)
    finally:
        await handle_leave(registry, connections, conn_id)
        connections.unregister(conn_id)
