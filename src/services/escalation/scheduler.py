"""Tick schedulers driving the escalation state machine.

All escalation durations are whole ticks.  Two implementations share one
interface:

``ManualScheduler``
    A deterministic fake clock.  Nothing happens until :meth:`advance` is
    called, which fires every due timer in order.  Used by tests and by
    anything that wants to fast-forward a session.

``AsyncioScheduler``
    Maps ticks onto ``loop.call_later`` so sessions run against wall-clock
    time inside a running event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

TimerCallback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Something that can run callbacks after a number of ticks."""

    def call_later(self, ticks: int, callback: TimerCallback) -> TimerHandle:
        """Run *callback* once, *ticks* ticks from now."""
        ...

    def call_every(self, ticks: int, callback: TimerCallback) -> TimerHandle:
        """Run *callback* every *ticks* ticks until cancelled."""
        ...


# ---------------------------------------------------------------------------
# ManualScheduler
# ---------------------------------------------------------------------------


class _ManualTimer:
    __slots__ = ("due", "interval", "callback", "cancelled")

    def __init__(self, due: int, interval: int | None, callback: TimerCallback) -> None:
        self.due = due
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fake clock advanced explicitly, one tick at a time or in bulk.

    Timers due at the same tick fire in the order they were (re)armed.
    A periodic timer is re-armed before its callback runs, so a callback
    may cancel its own timer.
    """

    def __init__(self) -> None:
        self._now = 0
        self._queue: list[tuple[int, int, _ManualTimer]] = []
        self._seq = itertools.count()

    @property
    def now(self) -> int:
        return self._now

    @property
    def pending_timers(self) -> int:
        """Number of armed, non-cancelled timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def call_later(self, ticks: int, callback: TimerCallback) -> _ManualTimer:
        timer = _ManualTimer(self._now + max(ticks, 0), None, callback)
        self._push(timer)
        return timer

    def call_every(self, ticks: int, callback: TimerCallback) -> _ManualTimer:
        if ticks < 1:
            raise ValueError("Periodic interval must be at least one tick")
        timer = _ManualTimer(self._now + ticks, ticks, callback)
        self._push(timer)
        return timer

    def advance(self, ticks: int = 1) -> None:
        """Move the clock forward, firing every timer that falls due."""
        if ticks < 0:
            raise ValueError("Cannot move the clock backwards")

        target = self._now + ticks
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            if timer.interval is not None:
                timer.due = due + timer.interval
                self._push(timer)
            timer.callback()
        self._now = target

    def _push(self, timer: _ManualTimer) -> None:
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))


# ---------------------------------------------------------------------------
# AsyncioScheduler
# ---------------------------------------------------------------------------


class _PeriodicAsyncioTimer:
    __slots__ = ("_loop", "_delay", "_callback", "_handle", "_cancelled")

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        callback: TimerCallback,
    ) -> None:
        self._loop = loop
        self._delay = delay
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._delay, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Runs tick callbacks on an asyncio event loop.

    Parameters
    ----------
    tick_seconds:
        Wall-clock length of one tick.
    loop:
        Event loop to schedule on.  Defaults to the running loop at the
        time each timer is armed.
    """

    def __init__(
        self,
        tick_seconds: float = 1.0,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self._tick_seconds = tick_seconds
        self._loop = loop

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    def call_later(self, ticks: int, callback: TimerCallback) -> asyncio.TimerHandle:
        return self._get_loop().call_later(max(ticks, 0) * self._tick_seconds, callback)

    def call_every(self, ticks: int, callback: TimerCallback) -> _PeriodicAsyncioTimer:
        if ticks < 1:
            raise ValueError("Periodic interval must be at least one tick")
        return _PeriodicAsyncioTimer(self._get_loop(), ticks * self._tick_seconds, callback)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()
