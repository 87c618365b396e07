"""Room-scoped relay between one renderer and its controllers.

This module implements the attach/forward/detach rules while remaining
framework-agnostic: it only talks to :class:`Connection` objects, so the
FastAPI router and the tests drive it the same way.

Every mutation of a room happens under that room's lock. Close handling
is idempotent and identity-guarded ("clear only if it is still me"), so a
stale close racing a renderer takeover never clobbers the newer session.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .audit import AuditLog
from .connection import Connection, ConnectionRegistry, new_cid
from .constants import AUDITED_CONTROLLER_TYPES, DEFAULT_ROOM, ROLE_CONTROLLER, ROLE_RENDERER
from .lobby import merge_snapshot, mirror_controller_event
from .messages import Message, Unparseable, decode
from .room import Room
from .schemas import (
    ControllerConnected,
    ControllerDisconnected,
    ControllerHello,
    ControllerInput,
    RendererHello,
    RendererPresence,
)
from .state import RoomTable

logger = logging.getLogger(__name__)

# Close code for a socket evicted by a newer renderer in the same room.
TAKEOVER_CLOSE_CODE = 4000


class Relay:
    def __init__(
        self,
        rooms: Optional[RoomTable] = None,
        registry: Optional[ConnectionRegistry] = None,
        audit: Optional[AuditLog] = None,
        default_room: str = DEFAULT_ROOM,
    ):
        self.rooms = rooms if rooms is not None else RoomTable()
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.audit = audit if audit is not None else AuditLog()
        self.default_room = default_room.strip() or DEFAULT_ROOM

    def resolve_room_name(self, raw: Optional[str]) -> str:
        """Trimmed room name, or the default room when absent or blank."""
        if raw is None:
            return self.default_room
        return raw.strip() or self.default_room

    # ---------------------------------------------------------------------
    # Attach
    # ---------------------------------------------------------------------

    async def attach(
        self,
        socket: Any,
        role: Optional[str],
        room_name: Optional[str] = None,
        ip: str = "",
    ) -> Optional[Connection]:
        """Attach an already-accepted *socket* in *role*.

        Returns the new :class:`Connection`, or ``None`` when *role* is not
        recognised; the caller is then expected to close the socket.
        """
        name = self.resolve_room_name(room_name)
        if role == ROLE_RENDERER:
            return await self._attach_renderer(socket, name, ip)
        if role == ROLE_CONTROLLER:
            return await self._attach_controller(socket, name, ip)
        logger.info("Rejecting socket from %s with role %r", ip or "unknown", role)
        return None

    async def _attach_renderer(self, socket: Any, name: str, ip: str) -> Connection:
        room = self.rooms.get_or_create(name)
        conn = Connection(socket, ROLE_RENDERER, name, ip=ip)
        async with room.lock:
            previous = room.install_renderer(conn)
            self.registry.add(conn)
            if previous is not None:
                logger.warning("Renderer takeover in room %r; closing previous session", name)
            self.audit.record("renderer_connected", name, {"ip": ip})
            logger.info("Renderer connected to room %r (%s)", name, ip or "unknown")

            await conn.send(RendererHello(room=name))
            await room.broadcast(RendererPresence(online=True))

        # The evicted socket is already out of the room; a slow close handshake
        # must not hold the lock.
        if previous is not None:
            await previous.close(code=TAKEOVER_CLOSE_CODE)
        return conn

    async def _attach_controller(self, socket: Any, name: str, ip: str) -> Connection:
        room = self.rooms.get_or_create(name)
        cid = new_cid()
        conn = Connection(socket, ROLE_CONTROLLER, name, cid=cid, ip=ip)
        async with room.lock:
            room.add_controller(conn)
            self.registry.add(conn)
            self.audit.record("controller_connected", name, {"cid": cid, "ip": ip})
            logger.info("Controller %s connected to room %r (%s)", cid, name, ip or "unknown")

            await conn.send(ControllerHello(room=name, cid=cid))
            await conn.send(RendererPresence(online=room.renderer_online))
            await room.send_renderer(ControllerConnected(cid=cid))
        return conn

    # ---------------------------------------------------------------------
    # Forwarding
    # ---------------------------------------------------------------------

    async def handle(self, conn: Connection, frame: Union[str, bytes]) -> None:
        """Route one inbound frame from *conn* according to its role."""
        if conn not in self.registry:
            return
        inbound = decode(frame)
        if isinstance(inbound, Unparseable):
            logger.debug("Dropping malformed frame from %s in room %r", conn.label, conn.room)
            return

        room = self.rooms.get_or_create(conn.room)
        async with room.lock:
            if conn.is_renderer:
                await self._from_renderer(room, conn, inbound)
            else:
                await self._from_controller(room, conn, inbound)

    async def _from_renderer(self, room: Room, conn: Connection, message: Message) -> None:
        if room.renderer is not conn:
            # Evicted by a takeover; its late frames must not reach controllers.
            return
        if message.type == "game_event":
            data = message.get("data")
            self.audit.record("game_event", room.name, data if isinstance(data, dict) else {})
        elif message.type == "lobby":
            room.lobby = merge_snapshot(room.lobby, message.payload)
            logger.debug("Room %r lobby is now %s", room.name, room.lobby.model_dump())

        await room.broadcast_text(message.text)

    async def _from_controller(self, room: Room, conn: Connection, message: Message) -> None:
        msg_type = message.type
        if msg_type in AUDITED_CONTROLLER_TYPES:
            self.audit.record(f"controller_{msg_type}", room.name, {"cid": conn.cid, **message.payload})
            if mirror_controller_event(room.lobby, message):
                logger.debug("Room %r lobby mirror updated by %s: %s", room.name, conn.cid, room.lobby.model_dump())

        await room.send_renderer(ControllerInput(cid=conn.cid, msg=message.payload))

    # ---------------------------------------------------------------------
    # Detach
    # ---------------------------------------------------------------------

    async def detach(self, conn: Connection) -> None:
        """Handle the end of *conn*'s socket; safe to call more than once."""
        if not self.registry.discard(conn):
            return
        conn.open = False

        room = self.rooms.get_or_create(conn.room)
        async with room.lock:
            if conn.is_renderer:
                was_current = room.clear_renderer(conn)
                self.audit.record("renderer_disconnected", room.name, {"ip": conn.ip})
                logger.info("Renderer disconnected from room %r", room.name)
                if was_current:
                    await room.broadcast(RendererPresence(online=False))
            else:
                room.remove_controller(conn)
                self.audit.record("controller_disconnected", room.name, {"cid": conn.cid, "ip": conn.ip})
                logger.info("Controller %s disconnected from room %r", conn.cid, room.name)
                await room.send_renderer(ControllerDisconnected(cid=conn.cid))

    async def shutdown(self) -> None:
        """Close every live connection (server shutdown)."""
        for conn in self.registry:
            await conn.close(code=1001)
            await self.detach(conn)


__all__ = ["Relay", "TAKEOVER_CLOSE_CODE"]
