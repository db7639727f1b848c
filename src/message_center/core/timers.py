"""
Loop-bound timers.

Thin wrapper around ``loop.call_later`` giving one-shot and periodic
callbacks that can be cancelled by whoever owns them.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Timer:
    """One-shot or periodic callback on the running event loop."""

    def __init__(self, delay: float, callback: Callable[[], None],
                 periodic: bool = False,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = max(0.0, delay)
        self.callback = callback
        self.periodic = periodic
        self.tick = 0
        self._loop = loop or asyncio.get_running_loop()
        self._handle: Optional[asyncio.TimerHandle] = self._loop.call_later(self.delay, self._fire)

    @classmethod
    def periodic_timer(cls, interval: float, callback: Callable[[], None]) -> "Timer":
        return cls(interval, callback, periodic=True)

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self.tick += 1
        if self.periodic:
            self._handle = self._loop.call_later(self.delay, self._fire)
        else:
            self._handle = None
        self.callback()

    def __repr__(self) -> str:
        kind = "periodic" if self.periodic else "one-shot"
        return f"<Timer {kind} delay={self.delay:.3f}s active={self.is_active}>"
