"""
tablekit Kernel — Derivation Pipeline

Pure functions: raw records → filtered → sorted → paged.

    derive(records, state, config, modes) -> Derived

Each stage runs only when its concern is local. A delegated concern is
assumed to be reflected already in the records the caller hands back, so
the stage is skipped and records pass through untouched.

Order is fixed: search, field filters, sort, page slice.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterator, Mapping, Sequence
from datetime import date, datetime
from enum import Enum
from functools import cmp_to_key
from typing import Any

from tablekit.kernel.config import FilterDescriptor, TableConfig
from tablekit.kernel.types import (
    ELLIPSIS,
    LOCAL_MODES,
    MAX_VISIBLE_PAGES,
    NO_FILTER_SENTINEL,
    ConcernModes,
    SortDescriptor,
    TableState,
)

# ---------------------------------------------------------------------------
# Record access
# ---------------------------------------------------------------------------


def get_field(record: Any, key: str) -> Any:
    """Mapping lookup first, attribute access second. Missing → None."""
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def _iter_values(value: Any, seen: set[int] | None = None) -> Iterator[str]:
    if value is None:
        return
    if seen is None:
        seen = set()
    if isinstance(value, str):
        yield value
    elif isinstance(value, Enum):
        yield str(value.value)
    elif isinstance(value, (datetime, date)):
        yield value.isoformat()
    elif isinstance(value, (bool, int, float)):
        yield str(value)
    elif id(value) in seen:
        return
    elif isinstance(value, Mapping):
        seen.add(id(value))
        for item in value.values():
            yield from _iter_values(item, seen)
    elif isinstance(value, (list, tuple, set, frozenset)):
        seen.add(id(value))
        for item in value:
            yield from _iter_values(item, seen)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        seen.add(id(value))
        for f in dataclasses.fields(value):
            yield from _iter_values(getattr(value, f.name), seen)
    elif hasattr(value, "model_dump"):
        seen.add(id(value))
        yield from _iter_values(value.model_dump(), seen)
    elif hasattr(value, "__dict__"):
        seen.add(id(value))
        for name, item in vars(value).items():
            if not name.startswith("_"):
                yield from _iter_values(item, seen)
    else:
        yield str(value)


def record_text(record: Any) -> str:
    """
    Textual form of a record for local search: every value, one per line.
    Objects reached twice (cyclic references) are walked once.

    Field names are left out, so a term like "name" never matches every
    record just because each one has a name field.
    """
    return "\n".join(_iter_values(record))


# ---------------------------------------------------------------------------
# Stage 1 — search
# ---------------------------------------------------------------------------


def apply_search(records: Sequence[Any], term: str) -> list[Any]:
    """Case-insensitive substring match of term against each record's text."""
    if not term:
        return list(records)
    needle = term.lower()
    return [r for r in records if needle in record_text(r).lower()]


# ---------------------------------------------------------------------------
# Stage 2 — field filters
# ---------------------------------------------------------------------------


def is_no_filter(value: Any) -> bool:
    if value is None or value == "" or value == NO_FILTER_SENTINEL:
        return True
    if isinstance(value, (list, tuple, set, frozenset)) and not value:
        return True
    return False


def matches_filter(record: Any, descriptor: FilterDescriptor, value: Any) -> bool:
    if descriptor.predicate is not None:
        return bool(descriptor.predicate(record, value))
    record_value = get_field(record, descriptor.key)
    if isinstance(value, (list, tuple, set, frozenset)):
        # equality scan; record values may be unhashable (tag lists)
        return any(record_value == v for v in value)
    return record_value == value


def apply_filters(
    records: Sequence[Any],
    descriptors: Sequence[FilterDescriptor],
    active: Mapping[str, Any],
) -> list[Any]:
    """
    Keep records matching every active filter (logical AND).

    Only keys with a descriptor take part; other keys in `active` are inert.
    """
    checks = [(d, active.get(d.key)) for d in descriptors if not is_no_filter(active.get(d.key))]
    if not checks:
        return list(records)
    return [r for r in records if all(matches_filter(r, d, v) for d, v in checks)]


# ---------------------------------------------------------------------------
# Stage 3 — sort
# ---------------------------------------------------------------------------


def compare_values(a: Any, b: Any) -> int:
    """
    Three-way compare for sort keys.

    None equals None and sorts after everything else. Values that cannot be
    ordered against each other are grouped by type name first, then by
    string form, which keeps the ordering total across mixed types.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        if a == b:
            return 0
        return -1 if a < b else 1
    except TypeError:
        ka = (type(a).__name__, str(a))
        kb = (type(b).__name__, str(b))
        return (ka > kb) - (ka < kb)


def apply_sort(records: Sequence[Any], sort: SortDescriptor | None) -> list[Any]:
    """
    Stable sort on one field.

    desc negates the comparator instead of reversing the output, so records
    with equal keys keep their input order in both directions.
    """
    if sort is None:
        return list(records)

    sign = -1 if sort.descending else 1
    keyed = [(get_field(r, sort.field), r) for r in records]
    keyed.sort(key=cmp_to_key(lambda x, y: sign * compare_values(x[0], y[0])))
    return [r for _, r in keyed]


# ---------------------------------------------------------------------------
# Stage 4 — page slice
# ---------------------------------------------------------------------------


def apply_page(records: Sequence[Any], page: int, page_size: int) -> list[Any]:
    start = (page - 1) * page_size
    return list(records[start : start + page_size])


def total_pages(count: int, page_size: int) -> int:
    """ceil(count / page_size), never less than 1."""
    return max(1, math.ceil(count / page_size))


def page_range(page: int, page_size: int, total: int) -> tuple[int, int]:
    """1-based inclusive (first, last) record numbers shown on a page. (0, 0) when empty."""
    start = (page - 1) * page_size + 1
    if total <= 0 or start > total:
        return (0, 0)
    return (start, min(page * page_size, total))


def page_numbers(page: int, pages: int) -> list[int | str]:
    """
    Page links to show, at most MAX_VISIBLE_PAGES numbers plus ELLIPSIS markers.

    page_numbers(1, 10)  → [1, 2, 3, 4, "ellipsis", 10]
    page_numbers(5, 10)  → [1, "ellipsis", 4, 5, 6, "ellipsis", 10]
    page_numbers(9, 10)  → [1, "ellipsis", 7, 8, 9, 10]
    """
    if pages <= MAX_VISIBLE_PAGES:
        return list(range(1, pages + 1))
    if page <= 3:
        return [1, 2, 3, 4, ELLIPSIS, pages]
    if page >= pages - 2:
        return [1, ELLIPSIS, *range(pages - 3, pages + 1)]
    return [1, ELLIPSIS, page - 1, page, page + 1, ELLIPSIS, pages]


# ---------------------------------------------------------------------------
# Full chain
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Derived:
    """Output of one derivation pass."""

    filtered: list[Any]
    paginated: list[Any]
    total: int
    total_pages: int


def derive(
    records: Sequence[Any],
    state: TableState,
    config: TableConfig,
    modes: ConcernModes = LOCAL_MODES,
) -> Derived:
    result = list(records)

    if config.search.enabled and state.settled_search and not modes.is_delegated("search"):
        result = apply_search(result, state.settled_search)

    if config.filters and not modes.is_delegated("filters"):
        result = apply_filters(result, config.filters, state.filters)

    if state.sort is not None and not modes.is_delegated("sort"):
        result = apply_sort(result, state.sort)

    if modes.is_delegated("pagination"):
        # The caller's records already are the requested page
        total = state.total or 0
        paginated = result
    else:
        total = len(result)
        paginated = apply_page(result, state.page, state.page_size) if config.pagination.enabled else result

    return Derived(
        filtered=result,
        paginated=paginated,
        total=total,
        total_pages=total_pages(total, state.page_size),
    )
