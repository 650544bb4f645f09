"""
tablekit Kernel — the table engine.

Components:
  reducer   — (state, action, modes) → ReduceResult  (pure, deterministic)
  pipeline  — records → filtered → sorted → paged  (pure)
  debounce  — timers and the search debouncer
  view_mode — view mode persistence port and stores
  engine    — coordinates reducer + pipeline + callbacks + store + timers

Query helpers (from pipeline):
  apply_search, apply_filters, apply_sort, apply_page, derive
"""

from tablekit.kernel.config import (
    CardsConfig,
    FilterDescriptor,
    FilterOption,
    PaginationConfig,
    SearchConfig,
    SortingConfig,
    TableConfig,
)
from tablekit.kernel.debounce import AsyncioScheduler, Debouncer, ManualScheduler
from tablekit.kernel.engine import TableEngine, TableView
from tablekit.kernel.pipeline import (
    apply_filters,
    apply_page,
    apply_search,
    apply_sort,
    derive,
)
from tablekit.kernel.reducer import initial_state, reduce, reduce_all
from tablekit.kernel.selection import Selection
from tablekit.kernel.types import Mode, SortDescriptor, SortOrder, TableState, ViewMode
from tablekit.kernel.view_mode import (
    HttpViewModeStore,
    JsonFileViewModeStore,
    MemoryViewModeStore,
    ViewModeStore,
)

__all__ = [
    "TableEngine",
    "TableView",
    "TableConfig",
    "SearchConfig",
    "FilterDescriptor",
    "FilterOption",
    "SortingConfig",
    "PaginationConfig",
    "CardsConfig",
    "TableState",
    "SortDescriptor",
    "SortOrder",
    "ViewMode",
    "Mode",
    "Selection",
    "reduce",
    "reduce_all",
    "initial_state",
    "apply_search",
    "apply_filters",
    "apply_sort",
    "apply_page",
    "derive",
    "AsyncioScheduler",
    "ManualScheduler",
    "Debouncer",
    "ViewModeStore",
    "MemoryViewModeStore",
    "JsonFileViewModeStore",
    "HttpViewModeStore",
]
