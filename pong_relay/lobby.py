"""Lobby helpers shared by the relay and the controller-side state machine.

The renderer is the only authority on lobby state. The relay keeps an
advisory mirror per room (``mirror_controller_event`` / ``merge_snapshot``)
and controllers reconcile their optimistic local choice against the last
snapshot with the pure ``merge_lobby_view``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .constants import CONTROLLER_MODES, MODES, SEATS
from .messages import Message
from .schemas import LobbyState


def _seat_flags(value: Any, fallback: Dict[str, bool]) -> Dict[str, bool]:
    if not isinstance(value, dict):
        return dict(fallback)
    return {seat: bool(value.get(seat, False)) for seat in SEATS}


def merge_snapshot(current: LobbyState, payload: Any) -> LobbyState:
    """Return *current* overlaid with the fields present in a ``lobby`` snapshot.

    Missing or malformed fields keep their previous value.
    """
    if not isinstance(payload, dict):
        return current
    mode = payload.get("mode")
    return LobbyState(
        mode=mode if isinstance(mode, str) and mode in MODES else current.mode,
        claimed=_seat_flags(payload.get("claimed"), current.claimed),
        ready=_seat_flags(payload.get("ready"), current.ready),
    )


def mirror_controller_event(lobby: LobbyState, message: Message) -> bool:
    """Apply a controller ``mode``/``claim``/``ready`` message to the room mirror.

    Returns ``True`` if the mirror changed. Forwarding is unaffected either way.
    """
    msg_type = message.type
    if msg_type == "mode":
        mode = message.get("mode")
        if mode in CONTROLLER_MODES and lobby.mode != mode:
            lobby.mode = mode
            return True
    elif msg_type == "claim":
        seat = message.get("who")
        if seat in SEATS and not lobby.claimed.get(seat):
            lobby.claimed[seat] = True
            return True
    elif msg_type == "ready":
        seat = message.get("who")
        if seat in SEATS:
            flag = bool(message.get("ready"))
            if lobby.ready.get(seat) != flag:
                lobby.ready[seat] = flag
                return True
    return False


# ---------------------------------------------------------------------------
# Controller-side view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeatView:
    seat: str
    selectable: bool
    selected: bool


@dataclass(frozen=True)
class LobbyView:
    mode: Optional[str]
    me: Optional[str]
    seats: Tuple[SeatView, ...]
    ready_enabled: bool
    ready_active: bool

    def seat(self, seat: str) -> SeatView:
        for view in self.seats:
            if view.seat == seat:
                return view
        raise KeyError(seat)


def merge_lobby_view(lobby: LobbyState, mode: Optional[str], me: Optional[str]) -> LobbyView:
    """Combine the last authoritative snapshot with the local (predicted) choice.

    In ``pvp`` a seat claimed by somebody else cannot be picked; the seat this
    controller picked stays selectable whatever the snapshot says.
    """
    seats = []
    for seat in SEATS:
        taken_by_other = mode == "pvp" and bool(lobby.claimed.get(seat)) and me != seat
        seats.append(SeatView(seat=seat, selectable=not taken_by_other, selected=me == seat))

    ready_enabled = mode in CONTROLLER_MODES and me is not None
    ready_active = mode == "pvp" and me is not None and bool(lobby.ready.get(me))
    return LobbyView(
        mode=mode,
        me=me,
        seats=tuple(seats),
        ready_enabled=ready_enabled,
        ready_active=ready_active,
    )


__all__ = [
    "merge_snapshot",
    "mirror_controller_event",
    "SeatView",
    "LobbyView",
    "merge_lobby_view",
]
