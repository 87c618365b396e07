"""In-memory room table.

One :class:`RoomTable` is created per application (see ``app.create_app``)
and reached only through the relay; rooms are created on first reference
and kept for the life of the process.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .room import Room

logger = logging.getLogger(__name__)


class RoomTable:
    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def get_or_create(self, name: str) -> Room:
        room = self._rooms.get(name)
        if room is None:
            room = Room(name)
            self._rooms[name] = room
            logger.debug("Created room %r", name)
        return room

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def names(self) -> List[str]:
        return list(self._rooms)

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))


__all__ = ["RoomTable"]
