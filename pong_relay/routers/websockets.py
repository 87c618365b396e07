from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from ..relay import Relay

router = APIRouter(prefix="", tags=["ws"])
logger = logging.getLogger(__name__)


def client_ip(ws: WebSocket) -> str:
    """First hop of ``X-Forwarded-For`` if present, else the peer address."""
    forwarded = ws.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return ws.client.host if ws.client else ""


@router.websocket("/ws")
async def relay_endpoint(
    ws: WebSocket,
    role: Optional[str] = Query(default=None),
    room: Optional[str] = Query(default=None),
):
    await ws.accept()
    relay: Relay = ws.app.state.relay
    conn = await relay.attach(ws, role, room, ip=client_ip(ws))
    if conn is None:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            frame = message.get("text")
            if frame is None:
                frame = message.get("bytes")
            if frame is None:
                continue
            await relay.handle(conn, frame)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning("WebSocket error on %s in room %r: %s", conn.label, conn.room, e)
    finally:
        await relay.detach(conn)
