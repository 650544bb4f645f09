"""
tablekit Kernel — Reducer

Pure function: (state, action, modes) → ReduceResult

All query state of a table instance changes through here. Rules that
used to be implicit side effects are explicit in the transitions:

- Page reset: settling search text, setting a filter, setting the sort,
  resetting filters, and changing the page size all land on page 1 in the
  same transition, so no derivation ever reads a stale page.
- Page ceiling: a shorter collection or a smaller authoritative total pulls
  the page back to the last one that exists (page.clamp, total.set).
- Delegation: a search/filters/sort effect is only emitted when that concern
  is delegated (see ConcernModes). Locally-owned concerns are derived by the
  pipeline instead, and nobody needs to be told.

Page, page size, selection, and view mode changes always emit an effect; the
engine decides which callbacks exist.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from tablekit.kernel.config import TableConfig
from tablekit.kernel.types import (
    ACTION_TYPES,
    LOCAL_MODES,
    Action,
    ConcernModes,
    Effect,
    ReduceResult,
    SortDescriptor,
    SortOrder,
    TableState,
    ViewMode,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


def initial_state(config: TableConfig, stored_view_mode: str | None = None) -> TableState:
    """
    The state of a freshly created table.

    A stored view mode (from the persistence port) wins over the configured
    default when it is a known mode.
    """
    view_mode = _coerce_view_mode(stored_view_mode) or config.default_view_mode
    return TableState(
        view_mode=view_mode,
        filters=config.initial_filters,
        sort=config.sorting.default_sort,
        page=1,
        page_size=config.pagination.page_size,
        total=config.pagination.total,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(state: TableState, reason: str) -> ReduceResult:
    return ReduceResult(state=state, accepted=False, reason=reason)


def _ok(state: TableState, *effects: Effect) -> ReduceResult:
    return ReduceResult(state=state, accepted=True, effects=list(effects))


def _coerce_view_mode(value: Any) -> ViewMode | None:
    try:
        return ViewMode(value)
    except ValueError:
        return None


def _coerce_sort_order(value: Any) -> SortOrder | None:
    try:
        return SortOrder(value)
    except ValueError:
        return None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def reduce(state: TableState, action: Action, modes: ConcernModes = LOCAL_MODES) -> ReduceResult:
    """
    Apply one action to the current state.
    Returns ReduceResult with the next state, accepted flag, and effects.

    Pure function. TableState is immutable, so the input is never modified.
    """
    if action.type not in ACTION_TYPES:
        return _reject(state, f"UNKNOWN_ACTION: {action.type}")

    result = _HANDLERS[action.type](state, action.payload, modes)
    if not result.accepted:
        logger.debug("reducer: rejected %s (%s)", action.type, result.reason)
    return result


def reduce_all(
    state: TableState,
    actions: list[Action],
    modes: ConcernModes = LOCAL_MODES,
) -> TableState:
    """
    Apply a sequence of actions. Rejections are skipped, effects dropped.
    Returns the final state.
    """
    for action in actions:
        result = reduce(state, action, modes)
        if result.accepted:
            state = result.state
    return state


# ---------------------------------------------------------------------------
# View mode
# ---------------------------------------------------------------------------


def _handle_view_mode_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    mode = _coerce_view_mode(payload.get("mode"))
    if mode is None:
        return _reject(state, f"INVALID_VIEW_MODE: {payload.get('mode')!r} is not 'table' or 'cards'")
    return _ok(state.evolve(view_mode=mode), Effect("view_mode", mode))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _handle_search_input(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    text = payload.get("text")
    text = "" if text is None else str(text)
    return _ok(state.evolve(search_term=text))


def _handle_search_settle(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    text = payload.get("text")
    text = "" if text is None else str(text)
    new_state = state.evolve(settled_search=text, page=1)
    if modes.is_delegated("search"):
        return _ok(new_state, Effect("search", text))
    return _ok(new_state)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def _handle_filter_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    key = payload.get("key")
    if not isinstance(key, str) or not key:
        return _reject(state, "MISSING_KEY: filter.set requires a non-empty 'key'")

    filters = {**state.filters, key: payload.get("value")}
    new_state = state.evolve(filters=filters, page=1)
    if modes.is_delegated("filters"):
        return _ok(new_state, Effect("filters", dict(filters)))
    return _ok(new_state)


def _handle_filters_reset(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    filters = dict(payload.get("filters") or {})
    sort = payload.get("sort")

    new_state = state.evolve(
        filters=filters,
        search_term="",
        settled_search="",
        sort=sort,
        page=1,
    )

    effects: list[Effect] = []
    if modes.is_delegated("filters"):
        effects.append(Effect("filters", dict(filters)))
    if modes.is_delegated("sort") and sort is not None:
        effects.append(Effect("sort", sort))
    if modes.is_delegated("search") and (state.settled_search or state.search_term):
        effects.append(Effect("search", ""))
    return _ok(new_state, *effects)


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


def _handle_sort_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    field = payload.get("field")
    if not isinstance(field, str) or not field:
        return _reject(state, "MISSING_FIELD: sort.set requires a non-empty 'field'")

    order = _coerce_sort_order(payload.get("order", SortOrder.ASC))
    if order is None:
        return _reject(state, f"INVALID_SORT_ORDER: {payload.get('order')!r} is not 'asc' or 'desc'")

    sort = SortDescriptor(field=field, order=order)
    new_state = state.evolve(sort=sort, page=1)
    if modes.is_delegated("sort"):
        return _ok(new_state, Effect("sort", sort))
    return _ok(new_state)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def _handle_page_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    page = payload.get("page")
    if not _is_int(page):
        return _reject(state, f"INVALID_PAGE: {page!r} is not an integer")

    page = max(1, page)
    max_page = payload.get("max_page")
    if _is_int(max_page):
        page = min(page, max(1, max_page))

    return _ok(state.evolve(page=page), Effect("page", page))


def _handle_page_clamp(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    max_page = payload.get("max_page")
    if not _is_int(max_page):
        return _reject(state, f"INVALID_PAGE: max_page {max_page!r} is not an integer")
    page = min(state.page, max(1, max_page))
    if page == state.page:
        return _ok(state)
    return _ok(state.evolve(page=page))


def _handle_page_size_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    page_size = payload.get("page_size")
    if not _is_int(page_size) or page_size <= 0:
        return _reject(state, f"INVALID_PAGE_SIZE: {page_size!r} must be a positive integer")
    return _ok(state.evolve(page_size=page_size, page=1), Effect("page_size", page_size))


def _handle_total_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    total = payload.get("total")
    if not _is_int(total) or total < 0:
        return _reject(state, f"INVALID_TOTAL: {total!r} must be a non-negative integer")
    page = state.page
    if modes.is_delegated("pagination"):
        page = min(page, max(1, math.ceil(total / state.page_size)))
    return _ok(state.evolve(total=total, page=page))


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def _handle_selection_toggle(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    row_id = payload.get("id")
    if not isinstance(row_id, str):
        return _reject(state, f"INVALID_ROW_ID: {row_id!r} is not a string")
    selection = state.selection.toggle(row_id)
    return _ok(state.evolve(selection=selection), Effect("selection", selection.ids))


def _handle_selection_set(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    row_ids = payload.get("ids") or []
    if not all(isinstance(i, str) for i in row_ids):
        return _reject(state, "INVALID_ROW_ID: selection.set requires string ids")

    selection = state.selection.set_all(row_ids)
    new_state = state.evolve(selection=selection)
    if selection.same_as(state.selection):
        return _ok(new_state)
    return _ok(new_state, Effect("selection", selection.ids))


def _handle_selection_clear(state: TableState, payload: dict, modes: ConcernModes) -> ReduceResult:
    if not state.selection:
        return _ok(state)
    selection = state.selection.clear()
    return _ok(state.evolve(selection=selection), Effect("selection", selection.ids))


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Any] = {
    "view_mode.set": _handle_view_mode_set,
    # Search
    "search.input": _handle_search_input,
    "search.settle": _handle_search_settle,
    # Filters
    "filter.set": _handle_filter_set,
    "filters.reset": _handle_filters_reset,
    # Sort
    "sort.set": _handle_sort_set,
    # Pagination
    "page.set": _handle_page_set,
    "page.clamp": _handle_page_clamp,
    "page_size.set": _handle_page_size_set,
    "total.set": _handle_total_set,
    # Selection
    "selection.toggle": _handle_selection_toggle,
    "selection.set": _handle_selection_set,
    "selection.clear": _handle_selection_clear,
}
