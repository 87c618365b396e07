"""Bounded in-memory audit trail of room activity.

Appends are O(1); once ``max_entries`` is reached the oldest entry is
evicted. Recording never raises, so it is safe to call from the relay path.
"""
from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, List, Optional

from .schemas import LogEntry

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AuditLog:
    def __init__(self, max_entries: int = 2000):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)

    def record(self, event_type: str, room: Optional[str] = None, data: Any = None) -> None:
        try:
            if data is None:
                data = {}
            elif not isinstance(data, dict):
                data = {"value": repr(data)}
            self._entries.append(LogEntry(ts=utc_timestamp(), type=event_type, room=room, data=data))
        except Exception:
            logger.exception("Failed to record audit event %s for room %s", event_type, room)

    def entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Return buffered entries, newest first."""
        rows = list(reversed(self._entries))
        if limit is not None:
            rows = rows[:limit]
        return rows

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["AuditLog", "utc_timestamp"]
