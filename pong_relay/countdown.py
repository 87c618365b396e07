from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from .constants import COUNTDOWN_SECONDS


class Countdown:
    """Client-local pre-round countdown.

    Calls ``on_tick(n)`` for ``n = seconds .. 1`` one second apart, then
    ``on_done()``. Calling :meth:`start` while running restarts from the top.
    Models the countdown overlay of ``static/controller.html``.
    """

    def __init__(
        self,
        seconds: int = COUNTDOWN_SECONDS,
        on_tick: Optional[Callable[[int], None]] = None,
        on_done: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.seconds = seconds
        self.on_tick = on_tick
        self.on_done = on_done
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def wait(self) -> None:
        """Wait for the current run to finish (returns at once if idle)."""
        while self.running:
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if task is self._task:
                    raise

    async def _run(self) -> None:
        remaining = self.seconds
        while remaining > 0:
            if self.on_tick is not None:
                self.on_tick(remaining)
            await self._sleep(1)
            remaining -= 1
        if self.on_done is not None:
            self.on_done()


__all__ = ["Countdown"]
