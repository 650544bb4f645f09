"""
tablekit Kernel — Shared Types

Data classes used across config, reducer, pipeline, and engine.
These are the contracts that bind the kernel together.

- `TableState` is the full query state of one table instance (immutable)
- `Action` is the only way to change it (see reducer.reduce)
- `Effect` names a callback the engine must run after a transition
- `ConcernModes` records, per concern, whether the engine or the caller owns it
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from tablekit.kernel.selection import Selection

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_TABLE_ID = "table"
DEFAULT_DEBOUNCE_MS = 300
DEFAULT_PAGE_SIZE = 20
DEFAULT_PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 50, 100)

# Filter value meaning "show everything" for select-style filters
NO_FILTER_SENTINEL = "all"

# Marker used by page_numbers() between non-adjacent page links
ELLIPSIS = "ellipsis"
MAX_VISIBLE_PAGES = 5


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ViewMode(str, Enum):
    TABLE = "table"
    CARDS = "cards"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FilterKind(str, Enum):
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATE = "date"
    DATE_RANGE = "dateRange"
    NUMBER = "number"
    CUSTOM = "custom"


class Mode(str, Enum):
    """Who computes a concern: the derivation pipeline or the caller's data source."""

    LOCAL = "local"
    DELEGATED = "delegated"


# Action types understood by the reducer
ACTION_TYPES: set[str] = {
    "view_mode.set",
    "search.input",
    "search.settle",
    "filter.set",
    "filters.reset",
    "sort.set",
    "page.set",
    "page.clamp",
    "page_size.set",
    "total.set",
    "selection.toggle",
    "selection.set",
    "selection.clear",
}

# Effect kinds emitted by the reducer
EFFECT_KINDS: set[str] = {
    "view_mode",
    "search",
    "filters",
    "sort",
    "page",
    "page_size",
    "selection",
}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SortDescriptor:
    field: str
    order: SortOrder = SortOrder.ASC

    @property
    def descending(self) -> bool:
        return self.order == SortOrder.DESC

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "order": SortOrder(self.order).value}


@dataclass(frozen=True)
class TableState:
    """
    The query state of one table instance.

    search_term is the raw text as typed; settled_search is the value the
    debouncer last settled on, and the only one the pipeline reads.
    total is only meaningful when pagination is delegated.
    """

    view_mode: ViewMode = ViewMode.TABLE
    search_term: str = ""
    settled_search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    sort: SortDescriptor | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total: int | None = None
    selection: Selection = field(default_factory=Selection)

    def evolve(self, **changes: Any) -> TableState:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "view_mode": ViewMode(self.view_mode).value,
            "search_term": self.search_term,
            "settled_search": self.settled_search,
            "filters": dict(self.filters),
            "sort": self.sort.to_dict() if self.sort else None,
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "selected_rows": list(self.selection.ids),
        }


@dataclass(frozen=True)
class Action:
    """
    One requested state change.
    The reducer reads only `type` and `payload`.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Effect:
    """A callback the engine must invoke after a transition is committed."""

    kind: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.kind not in EFFECT_KINDS:
            raise ValueError(f"unknown effect kind: {self.kind!r}")


@dataclass(frozen=True)
class ConcernModes:
    search: Mode = Mode.LOCAL
    filters: Mode = Mode.LOCAL
    sort: Mode = Mode.LOCAL
    pagination: Mode = Mode.LOCAL

    def is_delegated(self, concern: str) -> bool:
        return getattr(self, concern) == Mode.DELEGATED


LOCAL_MODES = ConcernModes()


class ReduceResult:
    """
    Result of applying one action to a state.
    Never throws — always returns one of these.
    """

    __slots__ = ("state", "accepted", "reason", "effects")

    def __init__(
        self,
        state: TableState,
        accepted: bool,
        reason: str | None = None,
        effects: list[Effect] | None = None,
    ) -> None:
        self.state = state
        self.accepted = accepted
        self.reason = reason
        self.effects = effects or []

    def effect(self, kind: str) -> Effect | None:
        for eff in self.effects:
            if eff.kind == kind:
                return eff
        return None

    def __repr__(self) -> str:  # pragma: no cover
        if self.accepted:
            return f"ReduceResult(accepted=True, effects={[e.kind for e in self.effects]!r})"
        return f"ReduceResult(accepted=False, reason={self.reason!r})"
