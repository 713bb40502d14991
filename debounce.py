"""Debounced callbacks on a cooperative scheduler.

A scheduler is anything with Tk's ``after(ms, callback)`` and
``after_cancel(handle)`` pair: a ``tk.Tk`` root works as-is, and
``AsyncioScheduler`` adapts an asyncio event loop.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional


class AsyncioScheduler:
    """Tk-style after/after_cancel on top of an asyncio loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def after(self, delay_ms: int, callback: Callable[[], None]):
        return self.loop.call_later(delay_ms / 1000.0, callback)

    def after_cancel(self, handle):
        handle.cancel()


class Debouncer:
    """Run ``callback`` once the triggers have been quiet for ``delay_ms``.

    Only one timer is ever pending; each trigger cancels and replaces it.
    Without a scheduler every trigger runs the callback right away.
    """

    def __init__(self, callback: Callable[[], None], delay_ms: int, scheduler=None):
        self.callback = callback
        self.delay_ms = delay_ms
        self.scheduler = scheduler
        self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self):
        if self.scheduler is None:
            self.callback()
            return
        self.cancel()
        self._handle = self.scheduler.after(self.delay_ms, self._fire)

    def cancel(self):
        if self._handle is not None:
            self.scheduler.after_cancel(self._handle)
            self._handle = None

    def flush(self):
        """Run a pending callback now; no-op when nothing is waiting."""
        if self._handle is None:
            return
        self.cancel()
        self.callback()

    def _fire(self):
        self._handle = None
        self.callback()
