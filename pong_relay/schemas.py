"""Pydantic data schemas used across the relay.

Outbound envelopes are modelled here so their field names stay in one place;
inbound payloads are deliberately *not* validated (see ``messages``).
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .constants import DEFAULT_MODE, SEATS


def _seat_flags() -> Dict[str, bool]:
    return {seat: False for seat in SEATS}


# -----------------------------
# Lobby
# -----------------------------

class LobbyState(BaseModel):
    """Per-room lobby snapshot. The renderer owns the canonical copy."""

    mode: str = DEFAULT_MODE
    claimed: Dict[str, bool] = Field(default_factory=_seat_flags)
    ready: Dict[str, bool] = Field(default_factory=_seat_flags)


# -----------------------------
# Server -> client envelopes
# -----------------------------

class RendererHello(BaseModel):
    type: Literal["hello"] = "hello"
    role: Literal["renderer"] = "renderer"
    room: str


class ControllerHello(BaseModel):
    type: Literal["hello"] = "hello"
    role: Literal["controller"] = "controller"
    room: str
    cid: str


class RendererPresence(BaseModel):
    type: Literal["renderer"] = "renderer"
    online: bool


class ControllerConnected(BaseModel):
    type: Literal["connect"] = "connect"
    cid: str


class ControllerDisconnected(BaseModel):
    type: Literal["disconnect"] = "disconnect"
    cid: str


class ControllerInput(BaseModel):
    type: Literal["input"] = "input"
    cid: str
    msg: Any


# -----------------------------
# Audit log
# -----------------------------

class LogEntry(BaseModel):
    ts: str
    type: str
    room: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class LogsResponse(BaseModel):
    count: int
    logs: List[LogEntry]


__all__ = [
    "LobbyState",
    "RendererHello",
    "ControllerHello",
    "RendererPresence",
    "ControllerConnected",
    "ControllerDisconnected",
    "ControllerInput",
    "LogEntry",
    "LogsResponse",
]
