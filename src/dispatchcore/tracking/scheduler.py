"""Cancellable periodic timers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)


class PeriodicHandle(Protocol):
    """Handle returned by :meth:`Scheduler.call_every`.

    After :meth:`cancel` returns the callback is never invoked again.
    Cancelling twice is a no-op.
    """

    @property
    def cancelled(self) -> bool:
        ...

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        *,
        immediate: bool = False,
    ) -> PeriodicHandle:
        """Invoke *callback* every *interval* seconds until cancelled.

        With ``immediate=True`` the first invocation happens as soon as
        possible instead of after one interval.
        """
        ...


class _LoopTimer:
    """Self-rescheduling ``loop.call_later`` chain."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._timer: asyncio.Handle | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self, *, immediate: bool) -> None:
        if immediate:
            self._timer = self._loop.call_soon(self._fire)
        else:
            self._timer = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            _logger.exception("Periodic callback %r failed", self._callback)
        if not self._cancelled:
            self._timer = self._loop.call_later(self._interval, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioScheduler:
    """:class:`Scheduler` running on an asyncio event loop.

    Parameters
    ----------
    loop : asyncio.AbstractEventLoop, optional
        Loop to schedule on. Defaults to the loop running when
        :meth:`call_every` is first called.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(
        self,
        interval: float,
        callback: Callable[[], None],
        *,
        immediate: bool = False,
    ) -> PeriodicHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        timer = _LoopTimer(self._loop, interval, callback)
        timer.start(immediate=immediate)
        return timer
