"""
tablekit Kernel — Timers and Debounce

The only place in the kernel where anything is deferred.

Scheduler is the timer abstraction the engine owns:
  AsyncioScheduler — real timers on the running asyncio loop
  ManualScheduler  — virtual clock advanced by hand (tests)
  PollingScheduler — wall clock for synchronous hosts; due timers run on poll()

Debouncer is a trailing debounce: every push() cancels the pending timer
and starts a new one, so only the last value before a quiet period is
ever delivered.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scheduler protocol
# ---------------------------------------------------------------------------


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay_ms milliseconds."""
        ...


class AsyncioScheduler:
    """Schedules on an asyncio loop. Without an explicit loop, uses the running one."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


class _ManualTimer:
    __slots__ = ("due", "seq", "callback", "cancelled")

    def __init__(self, due: int, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: _ManualTimer) -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class ManualScheduler:
    """
    Virtual clock in milliseconds.

    Nothing fires until advance() moves the clock past a timer's due time.
    Timers due at the same instant fire in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0
        self._queue: list[_ManualTimer] = []
        self._seq = 0

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualTimer:
        self._seq += 1
        timer = _ManualTimer(self.now + max(0, delay_ms), self._seq, callback)
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, ms: int) -> int:
        """Move the clock forward by ms, firing every timer that comes due. Returns fired count."""
        target = self.now + ms
        fired = 0
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = timer.due
            timer.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)


class PollingScheduler(ManualScheduler):
    """
    Real time without an event loop.

    Nothing runs in the background: the owner calls poll() whenever it is
    about to read time-dependent state, and every timer whose delay has
    elapsed fires then, in due order.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()
        self._clock = clock
        self._origin = clock()

    def _elapsed_ms(self) -> int:
        return int((self._clock() - self._origin) * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualTimer:
        self.now = max(self.now, self._elapsed_ms())
        return super().call_later(delay_ms, callback)

    def poll(self) -> int:
        """Fire every timer that is due by now. Returns fired count."""
        return self.advance(max(0, self._elapsed_ms() - self.now))


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------


class Debouncer:
    """Trailing debounce with reset-on-new-input."""

    def __init__(self, scheduler: Scheduler, delay_ms: int, callback: Callable[[Any], None]) -> None:
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._callback = callback
        self._handle: TimerHandle | None = None
        self._value: Any = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: Any) -> None:
        self.cancel()
        self._value = value
        self._handle = self._scheduler.call_later(self._delay_ms, self._fire)

    def cancel(self) -> None:
        """Drop the pending value, if any. It will never be delivered."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Deliver the pending value now instead of waiting out the quiet period."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def _fire(self) -> None:
        self._handle = None
        value, self._value = self._value, None
        logger.debug("debounce: settled %r", value)
        self._callback(value)
