"""
Engine -- Debounced Search Tests

Covers:
  - rapid input settles to the last value, exactly once
  - page reset happens at settlement, not on keystrokes
  - delegated search: callback told once per settlement, no local filtering
  - close() cancels the pending settlement
  - reset_filters() drops pending text
  - without an event loop, settlement happens on the next read after the quiet period
"""

import time

from tablekit.kernel.config import TableConfig
from tablekit.kernel.debounce import PollingScheduler
from tablekit.kernel.engine import TableEngine
from tablekit.kernel.types import ViewMode


def ids(records):
    return [r["id"] for r in records]


class TestDebounce:
    def test_three_rapid_inputs_settle_once_to_last(self, make_engine, products, scheduler):
        seen = []
        engine = make_engine(data=products, search={"enabled": True, "debounce_ms": 300, "on_search": seen.append})
        engine.set_search_term("l")
        scheduler.advance(100)
        engine.set_search_term("la")
        scheduler.advance(100)
        engine.set_search_term("lap")
        scheduler.advance(299)
        assert seen == []
        scheduler.advance(1)
        assert seen == ["lap"]
        scheduler.advance(10_000)
        assert seen == ["lap"]

    def test_local_search_filters_after_quiet_period(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True})
        engine.set_search_term("mouse")
        assert len(engine.filtered_data) == 5
        assert engine.search_term == "mouse"
        scheduler.advance(300)
        assert ids(engine.filtered_data) == ["p3"]

    def test_default_debounce_is_300ms(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True})
        engine.set_search_term("mouse")
        scheduler.advance(299)
        assert engine.state.settled_search == ""
        scheduler.advance(1)
        assert engine.state.settled_search == "mouse"

    def test_case_insensitive_example(self, make_engine, scheduler):
        engine = make_engine(data=[{"id": 1, "name": "A"}, {"id": 2, "name": "b"}], search={"enabled": True})
        engine.set_search_term("a")
        scheduler.advance(300)
        assert engine.filtered_data == [{"id": 1, "name": "A"}]

    def test_empty_search_is_noop(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True})
        engine.set_search_term("")
        scheduler.advance(300)
        assert engine.filtered_data == products

    def test_flush_settles_immediately(self, make_engine, products):
        engine = make_engine(data=products, search={"enabled": True})
        engine.set_search_term("laptop")
        engine.flush_search()
        assert ids(engine.filtered_data) == ["p1"]

    def test_search_disabled_never_settles(self, make_engine, products, scheduler):
        engine = make_engine(data=products)
        engine.set_search_term("laptop")
        scheduler.advance(1000)
        assert engine.search_term == "laptop"
        assert len(engine.filtered_data) == 5
        assert scheduler.pending == 0


class TestPageResetTiming:
    def test_keystrokes_keep_page_settlement_resets(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True}, pagination={"enabled": True, "page_size": 2})
        engine.set_page(3)
        engine.set_search_term("o")
        assert engine.page == 3
        scheduler.advance(300)
        assert engine.page == 1


class TestDelegatedSearch:
    def test_callback_receives_settled_value_and_data_passes_through(self, make_engine, products, scheduler):
        seen = []
        engine = make_engine(data=products, search={"enabled": True, "on_search": seen.append})
        engine.set_search_term("laptop")
        scheduler.advance(300)
        assert seen == ["laptop"]
        assert engine.filtered_data == products

    def test_two_settlements_two_calls(self, make_engine, products, scheduler):
        seen = []
        engine = make_engine(data=products, search={"enabled": True, "on_search": seen.append})
        engine.set_search_term("a")
        scheduler.advance(300)
        engine.set_search_term("ab")
        scheduler.advance(300)
        assert seen == ["a", "ab"]


class TestTeardown:
    def test_close_cancels_pending_timer(self, make_engine, products, scheduler):
        seen = []
        engine = make_engine(data=products, search={"enabled": True, "on_search": seen.append})
        engine.set_search_term("lap")
        engine.close()
        scheduler.advance(1000)
        assert seen == []
        assert engine.state.settled_search == ""
        assert engine.closed

    def test_input_after_close_is_stored_but_never_settles(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True})
        engine.close()
        engine.set_search_term("lap")
        scheduler.advance(1000)
        assert engine.search_term == "lap"
        assert engine.state.settled_search == ""

    def test_context_manager_closes(self, make_engine, products, scheduler):
        seen = []
        with make_engine(data=products, search={"enabled": True, "on_search": seen.append}) as engine:
            engine.set_search_term("x")
        scheduler.advance(1000)
        assert seen == []

    def test_reset_filters_drops_pending_text(self, make_engine, products, scheduler):
        engine = make_engine(data=products, search={"enabled": True})
        engine.set_search_term("laptop")
        engine.reset_filters()
        scheduler.advance(1000)
        assert engine.search_term == ""
        assert len(engine.filtered_data) == 5
        assert engine.view_mode == ViewMode.TABLE


class TestSynchronousHost:
    def test_default_engine_settles_after_quiet_period(self):
        config = TableConfig(data=[{"n": "a"}, {"n": "b"}], search={"enabled": True, "debounce_ms": 20})
        with TableEngine(config) as engine:
            engine.set_search_term("a")
            assert len(engine.filtered_data) == 2
            time.sleep(0.1)
            assert engine.filtered_data == [{"n": "a"}]

    def test_settlement_applied_before_page_is_read(self, products, store):
        now = [0.0]
        scheduler = PollingScheduler(lambda: now[0])
        config = TableConfig(
            data=products,
            search={"enabled": True, "debounce_ms": 250},
            pagination={"enabled": True, "page_size": 2},
        )
        with TableEngine(config, store=store, scheduler=scheduler) as engine:
            engine.set_page(3)
            engine.set_search_term("o")
            now[0] += 0.125
            assert engine.page == 3
            now[0] += 0.125
            assert engine.page == 1
            assert engine.state.settled_search == "o"

    def test_last_keystroke_wins(self, products, store):
        now = [0.0]
        seen = []
        scheduler = PollingScheduler(lambda: now[0])
        config = TableConfig(
            data=products,
            search={"enabled": True, "debounce_ms": 250, "on_search": seen.append},
        )
        with TableEngine(config, store=store, scheduler=scheduler) as engine:
            for text in ("m", "mo", "mou"):
                engine.set_search_term(text)
                now[0] += 0.125
            now[0] += 0.125
            engine.view()
            engine.view()
        assert seen == ["mou"]

    def test_closed_engine_never_settles(self, products, store):
        now = [0.0]
        scheduler = PollingScheduler(lambda: now[0])
        engine = TableEngine(TableConfig(data=products, search={"enabled": True}), store=store, scheduler=scheduler)
        engine.set_search_term("laptop")
        engine.close()
        now[0] += 10
        assert len(engine.filtered_data) == 5
