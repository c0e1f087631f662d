"""Trailing-edge debouncer on the asyncio event loop.

Every trigger() restarts the timer; the callback runs once, `delay` seconds
after the last trigger, and reads whatever state is current at that moment.
There is no leading-edge call; cancel() drops pending work (used on shutdown).

Outside a running event loop (sync callers, scripts, tests) trigger() only
marks work as pending; flush() runs it immediately.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable, Optional

from catering.utilities.config import DEBOUNCE_MS

logger = logging.getLogger(__name__)


class Debouncer:
    def __init__(self, callback: Callable[[], None], delay: float = DEBOUNCE_MS / 1000):
        self._callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending = False
        self.runs = 0

    @property
    def pending(self) -> bool:
        return self._pending

    def trigger(self) -> None:
        self._pending = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; recalculation deferred until flush()")
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> bool:
        '''Run pending work now. Returns True if the callback ran.'''
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if not self._pending:
            return False
        self._fire()
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = False

    def _fire(self) -> None:
        self._handle = None
        self._pending = False
        self.runs += 1
        self._callback()


__all__ = ['Debouncer']
