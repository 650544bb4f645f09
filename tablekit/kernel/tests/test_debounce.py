"""
Debounce Tests

ManualScheduler drives most of these. PollingScheduler runs on a fake
clock, and the asyncio tests use real timers with short delays.
"""

import asyncio

from tablekit.kernel.config import TableConfig
from tablekit.kernel.debounce import AsyncioScheduler, Debouncer, ManualScheduler, PollingScheduler
from tablekit.kernel.engine import TableEngine


class TestManualScheduler:
    def test_fires_in_due_order(self):
        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(50, lambda: fired.append("b"))
        scheduler.call_later(10, lambda: fired.append("a"))
        scheduler.call_later(50, lambda: fired.append("c"))
        assert scheduler.advance(49) == 1
        assert fired == ["a"]
        assert scheduler.advance(1) == 2
        assert fired == ["a", "b", "c"]
        assert scheduler.now == 50

    def test_cancelled_timer_never_fires(self):
        scheduler = ManualScheduler()
        fired = []
        handle = scheduler.call_later(10, lambda: fired.append(1))
        handle.cancel()
        assert scheduler.pending == 0
        assert scheduler.advance(100) == 0
        assert fired == []


class TestDebouncer:
    def test_trailing_value_only(self):
        scheduler = ManualScheduler()
        seen = []
        debouncer = Debouncer(scheduler, 300, seen.append)
        for text in ("a", "ab", "abc"):
            debouncer.push(text)
            scheduler.advance(100)
        assert seen == []
        assert debouncer.pending
        scheduler.advance(200)
        assert seen == ["abc"]
        assert not debouncer.pending

    def test_flush_delivers_now_once(self):
        scheduler = ManualScheduler()
        seen = []
        debouncer = Debouncer(scheduler, 300, seen.append)
        debouncer.push("x")
        debouncer.flush()
        scheduler.advance(1000)
        assert seen == ["x"]

    def test_flush_without_pending_is_noop(self):
        seen = []
        Debouncer(ManualScheduler(), 300, seen.append).flush()
        assert seen == []

    def test_zero_delay_fires_on_next_advance(self):
        scheduler = ManualScheduler()
        seen = []
        debouncer = Debouncer(scheduler, 0, seen.append)
        debouncer.push("now")
        assert seen == []
        scheduler.advance(0)
        assert seen == ["now"]


class FakeClock:
    def __init__(self):
        self.seconds = 100.0

    def __call__(self):
        return self.seconds


class TestPollingScheduler:
    def test_nothing_fires_without_poll(self):
        clock = FakeClock()
        scheduler = PollingScheduler(clock)
        fired = []
        scheduler.call_later(250, lambda: fired.append(1))
        clock.seconds += 1
        assert fired == []
        assert scheduler.poll() == 1
        assert fired == [1]

    def test_poll_before_due_fires_nothing(self):
        clock = FakeClock()
        scheduler = PollingScheduler(clock)
        fired = []
        scheduler.call_later(250, lambda: fired.append(1))
        clock.seconds += 0.125
        assert scheduler.poll() == 0
        clock.seconds += 0.125
        assert scheduler.poll() == 1

    def test_delay_counts_from_scheduling_time(self):
        clock = FakeClock()
        scheduler = PollingScheduler(clock)
        fired = []
        clock.seconds += 5
        scheduler.call_later(250, lambda: fired.append(1))
        clock.seconds += 0.125
        assert scheduler.poll() == 0
        clock.seconds += 0.125
        assert scheduler.poll() == 1

    def test_debouncer_settles_last_value(self):
        clock = FakeClock()
        scheduler = PollingScheduler(clock)
        seen = []
        debouncer = Debouncer(scheduler, 250, seen.append)
        for text in ("l", "la", "lap"):
            debouncer.push(text)
            clock.seconds += 0.125
            scheduler.poll()
        assert seen == []
        clock.seconds += 0.125
        scheduler.poll()
        assert seen == ["lap"]


class TestAsyncioScheduler:
    async def test_debouncer_on_running_loop(self):
        seen = []
        debouncer = Debouncer(AsyncioScheduler(), 20, seen.append)
        debouncer.push("l")
        debouncer.push("la")
        debouncer.push("lap")
        await asyncio.sleep(0.1)
        assert seen == ["lap"]

    async def test_engine_picks_asyncio_scheduler_inside_loop(self):
        seen = []
        config = TableConfig(search={"enabled": True, "debounce_ms": 10, "on_search": seen.append})
        with TableEngine(config) as engine:
            assert isinstance(engine.scheduler, AsyncioScheduler)
            engine.set_search_term("mouse")
            await asyncio.sleep(0.05)
        assert seen == ["mouse"]

    def test_engine_falls_back_to_polling_scheduler(self):
        with TableEngine(TableConfig()) as engine:
            assert isinstance(engine.scheduler, PollingScheduler)
