"""
tablekit Kernel — Table Engine

Sits between the pure functions (reducer, pipeline) and the outside world
(caller callbacks, the view mode store, timers). One engine per table
instance; its state is never shared.

    engine = TableEngine(config, store=store, scheduler=scheduler)
    engine.set_filter("type", "service")
    engine.paginated_data

Every setter goes through dispatch(): reduce, commit, then run effects.
Derived data is recomputed lazily, at most once per state/data change.
With a PollingScheduler (the default outside an event loop) a due search
settlement is applied before any read or dispatch.
Exceptions raised by caller callbacks propagate; only store failures are
swallowed (see ViewModePreference).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from tablekit.kernel import actions
from tablekit.kernel.config import TableConfig
from tablekit.kernel.debounce import AsyncioScheduler, Debouncer, PollingScheduler, Scheduler
from tablekit.kernel.pipeline import Derived, derive, is_no_filter, page_numbers, page_range
from tablekit.kernel.reducer import initial_state, reduce
from tablekit.kernel.selection import resolve_selected
from tablekit.kernel.types import (
    Action,
    Effect,
    ReduceResult,
    SortDescriptor,
    TableState,
    ViewMode,
)
from tablekit.kernel.view_mode import MemoryViewModeStore, ViewModePreference, ViewModeStore

logger = logging.getLogger(__name__)

# Process-wide store used when the caller does not inject one
default_view_mode_store = MemoryViewModeStore()


def _default_scheduler() -> Scheduler:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return PollingScheduler()
    return AsyncioScheduler()


@dataclass(frozen=True)
class TableView:
    """Everything a renderer needs for one frame, read at a single point in time."""

    view_mode: ViewMode
    search_term: str
    active_filters: dict[str, Any]
    sort: SortDescriptor | None
    page: int
    page_size: int
    selected_rows: list[str]
    filtered_data: list[Any]
    paginated_data: list[Any]
    total: int
    total_pages: int
    has_active_filters: bool
    has_search_term: bool
    can_go_previous: bool
    can_go_next: bool

    @property
    def is_table_view(self) -> bool:
        return self.view_mode == ViewMode.TABLE

    @property
    def is_cards_view(self) -> bool:
        return self.view_mode == ViewMode.CARDS


class TableEngine:
    def __init__(
        self,
        config: TableConfig,
        *,
        store: ViewModeStore | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config
        self.modes = config.modes
        self.scheduler = scheduler or _default_scheduler()

        self._preference = ViewModePreference(store or default_view_mode_store, config.id)
        self._state = initial_state(config, self._preference.load())
        self._data: list[Any] = list(config.data)
        self._data_version = 0
        self._derived: Derived | None = None
        self._derived_state: TableState | None = None
        self._derived_version = -1
        self._debouncer = Debouncer(self.scheduler, config.search.debounce_ms, self._settle_search)
        self._closed = False

    # -- lifecycle -------------------------------------------------------------

    def close(self) -> None:
        """Cancel the pending search settlement. Safe to call more than once."""
        self._debouncer.cancel()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> TableEngine:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- dispatch --------------------------------------------------------------

    def _poll(self) -> None:
        if isinstance(self.scheduler, PollingScheduler) and not self._closed:
            self.scheduler.poll()

    @property
    def state(self) -> TableState:
        self._poll()
        return self._state

    def dispatch(self, action: Action) -> ReduceResult:
        self._poll()
        result = reduce(self._state, action, self.modes)
        if not result.accepted:
            return result
        self._state = result.state
        self._run_effects(result.effects)
        return result

    def _run_effects(self, effects: list[Effect]) -> None:
        cfg = self.config
        for effect in effects:
            if effect.kind == "view_mode":
                self._preference.save(effect.value)
                if cfg.on_view_mode_change:
                    cfg.on_view_mode_change(effect.value)
            elif effect.kind == "search":
                cfg.search.on_search(effect.value)
            elif effect.kind == "filters":
                cfg.on_filters_change(effect.value)
            elif effect.kind == "sort":
                cfg.sorting.on_sort_change(effect.value)
            elif effect.kind == "page":
                if cfg.pagination.on_page_change:
                    cfg.pagination.on_page_change(effect.value)
            elif effect.kind == "page_size":
                if cfg.pagination.on_page_size_change:
                    cfg.pagination.on_page_size_change(effect.value)
            elif effect.kind == "selection":
                if cfg.on_row_selection_change:
                    cfg.on_row_selection_change(self.selected_records)

    # -- setters ---------------------------------------------------------------

    def set_view_mode(self, mode: ViewMode | str) -> ReduceResult:
        return self.dispatch(actions.set_view_mode(mode))

    def set_search_term(self, text: str) -> ReduceResult:
        """
        Store raw search text and (re)start the quiet period.
        Filtering and the page reset happen when the text settles.
        """
        result = self.dispatch(actions.input_search(text))
        if result.accepted and self.config.search.enabled and not self._closed:
            self._debouncer.push(self._state.search_term)
        return result

    def flush_search(self) -> None:
        """Settle pending search text immediately (e.g. on Enter)."""
        self._debouncer.flush()

    def _settle_search(self, text: str) -> None:
        if self._closed:
            return
        logger.debug("engine: table_id=%s search settled on %r", self.config.id, text)
        self.dispatch(actions.settle_search(text))

    def set_filter(self, key: str, value: Any) -> ReduceResult:
        return self.dispatch(actions.set_filter(key, value))

    def reset_filters(self) -> ReduceResult:
        """Back to default filters, default sort, no search text. Selection is kept."""
        self._debouncer.cancel()
        return self.dispatch(actions.reset_filters(self.config.initial_filters, self.config.sorting.default_sort))

    def set_sort(self, field: str, order: str = "asc") -> ReduceResult:
        return self.dispatch(actions.set_sort(field, order))

    def set_page(self, page: int) -> ReduceResult:
        return self.dispatch(actions.set_page(page, max_page=self.total_pages))

    def next_page(self) -> ReduceResult:
        return self.set_page(self.page + 1)

    def previous_page(self) -> ReduceResult:
        return self.set_page(self.page - 1)

    def set_page_size(self, page_size: int) -> ReduceResult:
        return self.dispatch(actions.set_page_size(page_size))

    def set_total(self, total: int) -> ReduceResult:
        return self.dispatch(actions.set_total(total))

    def set_data(
        self,
        records: Sequence[Any],
        *,
        total: int | None = None,
        reset_selection: bool = False,
    ) -> None:
        """
        Replace the raw collection, e.g. after the caller's data source answered
        a delegated query. The page is pulled back into range if the new
        collection is shorter. Selection survives unless reset_selection is set.
        """
        self._data = list(records)
        self._data_version += 1
        if total is not None:
            self.set_total(total)
        self.dispatch(actions.clamp_page(self.total_pages))
        if reset_selection:
            self.clear_selection()

    def toggle_row(self, row_id: str) -> ReduceResult:
        return self.dispatch(actions.toggle_row(row_id))

    def set_selected_rows(self, row_ids: Sequence[str]) -> ReduceResult:
        return self.dispatch(actions.set_selected_rows(list(row_ids)))

    def clear_selection(self) -> ReduceResult:
        return self.dispatch(actions.clear_selection())

    def is_selected(self, row_id: str) -> bool:
        return self._state.selection.is_selected(row_id)

    # -- state reads -----------------------------------------------------------

    @property
    def data(self) -> list[Any]:
        return list(self._data)

    @property
    def view_mode(self) -> ViewMode:
        return self._state.view_mode

    @property
    def is_table_view(self) -> bool:
        return self._state.view_mode == ViewMode.TABLE

    @property
    def is_cards_view(self) -> bool:
        return self._state.view_mode == ViewMode.CARDS

    @property
    def search_term(self) -> str:
        return self._state.search_term

    @property
    def active_filters(self) -> dict[str, Any]:
        return dict(self._state.filters)

    @property
    def sort(self) -> SortDescriptor | None:
        return self._state.sort

    @property
    def page(self) -> int:
        return self.state.page

    @property
    def page_size(self) -> int:
        return self._state.page_size

    @property
    def selected_rows(self) -> list[str]:
        return list(self._state.selection.ids)

    @property
    def selected_records(self) -> list[Any]:
        return resolve_selected(self._data, self._state.selection, self.config.get_row_id)

    # -- derived reads ---------------------------------------------------------

    def _derive(self) -> Derived:
        self._poll()
        stale = self._derived_state is not self._state or self._derived_version != self._data_version
        if self._derived is None or stale:
            self._derived = derive(self._data, self._state, self.config, self.modes)
            self._derived_state = self._state
            self._derived_version = self._data_version
        return self._derived

    @property
    def filtered_data(self) -> list[Any]:
        return list(self._derive().filtered)

    @property
    def paginated_data(self) -> list[Any]:
        return list(self._derive().paginated)

    @property
    def total(self) -> int:
        return self._derive().total

    @property
    def total_pages(self) -> int:
        return self._derive().total_pages

    @property
    def page_range(self) -> tuple[int, int]:
        total = self.total
        return page_range(self._state.page, self._state.page_size, total)

    @property
    def page_numbers(self) -> list[int | str]:
        pages = self.total_pages
        return page_numbers(self._state.page, pages)

    @property
    def has_active_filters(self) -> bool:
        return any(not is_no_filter(self._state.filters.get(d.key)) for d in self.config.filters)

    @property
    def has_search_term(self) -> bool:
        return len(self._state.search_term) > 0

    @property
    def can_go_previous(self) -> bool:
        return self.page > 1

    @property
    def can_go_next(self) -> bool:
        pages = self.total_pages
        return self._state.page < pages

    def view(self) -> TableView:
        derived = self._derive()
        return TableView(
            view_mode=self._state.view_mode,
            search_term=self._state.search_term,
            active_filters=dict(self._state.filters),
            sort=self._state.sort,
            page=self._state.page,
            page_size=self._state.page_size,
            selected_rows=list(self._state.selection.ids),
            filtered_data=list(derived.filtered),
            paginated_data=list(derived.paginated),
            total=derived.total,
            total_pages=derived.total_pages,
            has_active_filters=self.has_active_filters,
            has_search_term=self.has_search_term,
            can_go_previous=self.can_go_previous,
            can_go_next=self.can_go_next,
        )
