from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from .connection import Connection
from .messages import encode
from .schemas import LobbyState

# NOTE: ``Room`` only holds state and fan-out helpers. The attach/detach
# rules that mutate it live in ``pong_relay.relay`` and always run under
# ``Room.lock``.


class Room:
    """Runtime state for one room: at most one renderer, any number of controllers."""

    def __init__(self, name: str):
        self.name = name
        self.renderer: Optional[Connection] = None
        # active controller connections: cid -> connection
        self.controllers: Dict[str, Connection] = {}
        # Advisory mirror of the renderer-owned lobby
        self.lobby = LobbyState()
        # Serialises every mutation of this room; rooms never contend with each other
        self.lock = asyncio.Lock()

    # ---------------------------------------------------------------------
    # Membership
    # ---------------------------------------------------------------------

    @property
    def renderer_online(self) -> bool:
        return self.renderer is not None

    def install_renderer(self, conn: Connection) -> Optional[Connection]:
        """Make *conn* the renderer and return the one it displaced, if any."""
        previous = self.renderer
        self.renderer = conn
        if previous is conn:
            return None
        return previous

    def clear_renderer(self, conn: Connection) -> bool:
        """Clear the renderer slot only if it still holds *conn*."""
        if self.renderer is not conn:
            return False
        self.renderer = None
        return True

    def add_controller(self, conn: Connection) -> None:
        self.controllers[conn.cid] = conn

    def remove_controller(self, conn: Connection) -> bool:
        """Remove *conn* by cid only if that cid still maps to it."""
        if self.controllers.get(conn.cid) is not conn:
            return False
        del self.controllers[conn.cid]
        return True

    # -------------------- Fan-out helpers -------------------- #

    async def broadcast_text(self, text: str) -> None:
        """Send *text* verbatim to every controller in the room.

        Sends run concurrently so one slow controller does not hold back the rest.
        """
        targets = list(self.controllers.values())
        if targets:
            await asyncio.gather(*(conn.send_text(text) for conn in targets))

    async def broadcast(self, payload: Union[BaseModel, Dict[str, Any]]) -> None:
        await self.broadcast_text(encode(payload))

    async def send_renderer(self, payload: Union[BaseModel, Dict[str, Any]]) -> None:
        """Send *payload* to the renderer; dropped when none is attached."""
        if self.renderer is not None:
            await self.renderer.send(payload)

    def __repr__(self) -> str:
        return f"<Room {self.name!r} renderer={self.renderer_online} controllers={len(self.controllers)}>"


__all__ = ["Room"]
