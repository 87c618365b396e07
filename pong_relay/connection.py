"""Live socket bookkeeping.

A :class:`Connection` wraps whatever socket object the transport hands us
(a FastAPI ``WebSocket`` in production, a fake in tests); it only needs
awaitable ``send_text(str)`` and ``close(code=...)``.
"""
from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, Iterator, Optional, Set, Union

from pydantic import BaseModel

from .constants import ROLE_CONTROLLER, ROLE_RENDERER
from .messages import encode

logger = logging.getLogger(__name__)


def new_cid() -> str:
    """Return a fresh opaque controller id (128 random bits, hex encoded)."""
    return secrets.token_hex(16)


class Connection:
    """One attached socket: role, room and (controllers only) cid are fixed for its lifetime."""

    def __init__(self, socket: Any, role: str, room: str, cid: Optional[str] = None, ip: str = ""):
        self.socket = socket
        self.role = role
        self.room = room
        self.cid = cid
        self.ip = ip
        self.open = True

    @property
    def is_renderer(self) -> bool:
        return self.role == ROLE_RENDERER

    @property
    def is_controller(self) -> bool:
        return self.role == ROLE_CONTROLLER

    async def send_text(self, text: str) -> None:
        """Best-effort send; a closed or failing socket is a silent no-op."""
        if not self.open:
            return
        try:
            await self.socket.send_text(text)
        except Exception as exc:
            # The peer went away between our check and the write.
            self.open = False
            logger.debug("Dropping send to %s in room %s: %s", self.label, self.room, exc)

    async def send(self, message: Union[BaseModel, Dict[str, Any]]) -> None:
        await self.send_text(encode(message))

    async def close(self, code: int = 1000) -> None:
        """Close the socket; errors are ignored and repeated calls do nothing."""
        if not self.open:
            return
        self.open = False
        try:
            await self.socket.close(code=code)
        except Exception as exc:
            logger.debug("Ignoring close error for %s in room %s: %s", self.label, self.room, exc)

    @property
    def label(self) -> str:
        return f"{self.role}:{self.cid}" if self.cid else self.role

    def __repr__(self) -> str:
        return f"<Connection {self.label} room={self.room!r}>"


class ConnectionRegistry:
    """Set of every live connection across all rooms."""

    def __init__(self) -> None:
        self._connections: Set[Connection] = set()

    def add(self, conn: Connection) -> None:
        self._connections.add(conn)

    def discard(self, conn: Connection) -> bool:
        """Forget *conn*; returns ``False`` if it had already been removed."""
        if conn not in self._connections:
            return False
        self._connections.remove(conn)
        return True

    def count(self, role: Optional[str] = None) -> int:
        if role is None:
            return len(self._connections)
        return sum(1 for c in self._connections if c.role == role)

    def __contains__(self, conn: object) -> bool:
        return conn in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections))


__all__ = ["Connection", "ConnectionRegistry", "new_cid"]
