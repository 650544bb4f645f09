"""
tablekit Kernel — Action Construction

Factory functions for creating well-formed actions.
Used by the engine to translate setter calls into reducer input,
and by tests to build actions concisely.
"""

from __future__ import annotations

from typing import Any

from tablekit.kernel.types import Action, SortDescriptor


def set_view_mode(mode: str) -> Action:
    return Action("view_mode.set", {"mode": mode})


def input_search(text: str) -> Action:
    """Raw keystroke-level search text. Does not touch the page."""
    return Action("search.input", {"text": text})


def settle_search(text: str) -> Action:
    """Search text after the quiet period; this is what filters the collection."""
    return Action("search.settle", {"text": text})


def set_filter(key: str, value: Any) -> Action:
    return Action("filter.set", {"key": key, "value": value})


def reset_filters(filters: dict[str, Any], sort: SortDescriptor | None = None) -> Action:
    """
    Restore the given initial filter map and default sort, clear search text.
    The caller passes its defaults so the reducer stays config-free.
    """
    return Action("filters.reset", {"filters": dict(filters), "sort": sort})


def set_sort(field: str, order: str = "asc") -> Action:
    return Action("sort.set", {"field": field, "order": order})


def set_page(page: int, max_page: int | None = None) -> Action:
    """max_page is the current ceiling; the reducer clamps page into [1, max_page]."""
    payload: dict[str, Any] = {"page": page}
    if max_page is not None:
        payload["max_page"] = max_page
    return Action("page.set", payload)


def set_page_size(page_size: int) -> Action:
    return Action("page_size.set", {"page_size": page_size})


def set_total(total: int) -> Action:
    return Action("total.set", {"total": total})


def toggle_row(row_id: str) -> Action:
    return Action("selection.toggle", {"id": row_id})


def set_selected_rows(row_ids: list[str]) -> Action:
    return Action("selection.set", {"ids": list(row_ids)})


def clear_selection() -> Action:
    return Action("selection.clear")


def clamp_page(max_page: int) -> Action:
    """Pull the page back to max_page if it is past it. No page effect."""
    return Action("page.clamp", {"max_page": max_page})
