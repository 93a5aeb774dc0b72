"""Countdown clocks a quiz session can own.

A ticker calls its callback once per interval between start() and stop(). The session
never reads wall-clock time itself, so tests swap in ManualTicker and step it by hand.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

from ..config import TICK_INTERVAL

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Ticker(Protocol):
    @property
    def running(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class ManualTicker:
    """Ticker advanced explicitly by the caller."""

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self.ticks_fired = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            # the callback may stop us mid-loop (e.g. countdown reached zero)
            if self._callback is None:
                return
            self.ticks_fired += 1
            self._callback()


class AsyncioTicker:
    """Ticker backed by a task on the running event loop."""

    def __init__(self, interval: float = TICK_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run(callback))

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                callback()
            except Exception:
                logger.exception("Tick callback failed; stopping ticker")
                return
