"""Inbound frame decoding and outbound encoding.

Inbound frames are only parsed as far as the relay needs: anything that is
valid JSON becomes a :class:`Message` (its shape is never validated, so
renderer-defined types pass through untouched); everything else becomes
:class:`Unparseable`, the only thing that gets dropped.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel


@dataclass(frozen=True)
class Message:
    text: str  # the frame exactly as received
    payload: Any

    @property
    def type(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            value = self.payload.get("type")
            if isinstance(value, str):
                return value
        return None

    def get(self, key: str, default: Any = None) -> Any:
        if isinstance(self.payload, dict):
            return self.payload.get(key, default)
        return default


@dataclass(frozen=True)
class Unparseable:
    text: str


Inbound = Union[Message, Unparseable]


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON; browsers refuse them too.
    raise ValueError(f"invalid JSON constant {name}")


def decode(frame: Union[str, bytes]) -> Inbound:
    """Decode a text or binary websocket frame."""
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError:
            return Unparseable(text=frame.decode("utf-8", errors="replace"))
    try:
        payload = json.loads(frame, parse_constant=_reject_constant)
    except ValueError:
        return Unparseable(text=frame)
    return Message(text=frame, payload=payload)


def encode(message: Union[BaseModel, Dict[str, Any]]) -> str:
    """Serialise an outbound envelope compactly, the way browsers' JSON.stringify does."""
    if isinstance(message, BaseModel):
        message = message.model_dump()
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


__all__ = ["Message", "Unparseable", "Inbound", "decode", "encode"]
