"""Controller-side lobby state machine.

Mirrors what a phone controller does between "pick a mode" and "move the
paddle": ``mode-select -> player-select -> countdown -> live-control``,
with ``back`` from player-select. Seat and ready choices are applied
locally straight away and reconciled against the renderer's ``lobby``
snapshots through :func:`pong_relay.lobby.merge_lobby_view`.

The machine is transport-agnostic: outbound payloads go through the
``send`` callable, inbound ones are fed to :meth:`ControllerLobby.receive`.
It is the reference model of the state machine the inline script in
``static/controller.html`` runs in the browser.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .constants import CONTROLLER_MODES, SEATS
from .countdown import Countdown
from .lobby import LobbyView, merge_lobby_view, merge_snapshot
from .schemas import LobbyState

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    MODE_SELECT = "mode-select"
    PLAYER_SELECT = "player-select"
    COUNTDOWN = "countdown"
    LIVE_CONTROL = "live-control"


class ControllerLobby:
    def __init__(self, send: Callable[[Dict[str, Any]], None], countdown: Optional[Countdown] = None):
        self._send = send
        self.countdown = countdown if countdown is not None else Countdown()
        self.countdown.on_tick = self._on_tick
        self.countdown.on_done = self._on_countdown_done

        self.screen = Screen.MODE_SELECT
        self.mode: Optional[str] = None
        self.me: Optional[str] = None
        self.lobby = LobbyState()
        self.cid: Optional[str] = None
        self.connected = False
        self.renderer_online = False
        self.countdown_value: Optional[int] = None

    @property
    def view(self) -> LobbyView:
        return merge_lobby_view(self.lobby, self.mode, self.me)

    # -------------------- UI actions -------------------- #

    def choose_mode(self, mode: str) -> None:
        if mode not in CONTROLLER_MODES or self.screen != Screen.MODE_SELECT:
            return
        self.mode = mode
        self.me = None
        self._send({"type": "mode", "mode": mode})
        self.screen = Screen.PLAYER_SELECT

    def back(self) -> None:
        if self.screen != Screen.PLAYER_SELECT:
            return
        self.mode = None
        self.me = None
        self.screen = Screen.MODE_SELECT

    def choose_seat(self, seat: str) -> None:
        if seat not in SEATS or self.screen != Screen.PLAYER_SELECT:
            return
        if not self.view.seat(seat).selectable:
            return
        self.me = seat
        self._send({"type": "claim", "who": seat})
        # older renderers only understand "side"
        self._send({"type": "side", "who": seat})

    def press_ready(self) -> None:
        if not self.mode or not self.me:
            return
        if self.mode == "pvc":
            # Nobody to wait for: start straight away.
            self._send({"type": "start"})
            self.start_countdown()
        elif self.mode == "pvp":
            self._send({"type": "ready", "who": self.me, "ready": not self.lobby.ready.get(self.me, False)})

    def move(self, direction: int) -> None:
        if not self.me:
            return
        self._send({"type": "move", "who": self.me, "dir": direction})

    def pause(self) -> None:
        self._send({"type": "control", "action": "pause", "who": self.me})

    # -------------------- Inbound -------------------- #

    def receive(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            return
        msg_type = payload.get("type")
        if msg_type == "hello":
            self.cid = payload.get("cid")
        elif msg_type == "renderer":
            self.renderer_online = bool(payload.get("online"))
        elif msg_type == "lobby":
            self.lobby = merge_snapshot(self.lobby, payload)
        elif msg_type == "start":
            self.start_countdown()

    def connection_opened(self) -> None:
        self.connected = True

    def connection_lost(self) -> None:
        self.connected = False
        self.renderer_online = False

    # -------------------- Countdown -------------------- #

    def start_countdown(self) -> None:
        """Enter the countdown from any screen; restarts if already counting."""
        self.screen = Screen.COUNTDOWN
        self.countdown.start()

    def _on_tick(self, remaining: int) -> None:
        self.countdown_value = remaining

    def _on_countdown_done(self) -> None:
        self.countdown_value = None
        self.screen = Screen.LIVE_CONTROL
        logger.debug("Countdown finished, controller %s is live as %s", self.cid, self.me)


__all__ = ["Screen", "ControllerLobby"]
