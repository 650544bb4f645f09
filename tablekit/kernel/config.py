"""
tablekit Kernel — Table Configuration

Pydantic models for everything a caller hands to TableEngine. The engine
reads these once at construction; nothing here changes afterwards.

The presence of a delegation handler decides who owns a concern:
  search      — search.on_search
  filters     — on_filters_change
  sort        — sorting.on_sort_change
  pagination  — pagination.server_side (and then pagination.total)

TableConfig.modes turns that into an explicit ConcernModes value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tablekit.kernel.types import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE_OPTIONS,
    DEFAULT_TABLE_ID,
    ConcernModes,
    FilterKind,
    Mode,
    SortDescriptor,
    ViewMode,
)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)


class FilterOption(_ConfigModel):
    value: Any
    label: str = ""


class FilterDescriptor(_ConfigModel):
    """
    One filterable dimension.

    predicate, when given, replaces the default equality/containment test:
    predicate(record, active_value) -> bool.
    advanced only affects how a UI groups filters.
    """

    key: str
    kind: FilterKind = FilterKind.SELECT
    label: str = ""
    options: list[FilterOption] = Field(default_factory=list)
    placeholder: str | None = None
    default_value: Any = None
    advanced: bool = False
    predicate: Callable[[Any, Any], bool] | None = None


class SearchConfig(_ConfigModel):
    enabled: bool = False
    placeholder: str | None = None
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    on_search: Callable[[str], Any] | None = None


class SortingConfig(_ConfigModel):
    enabled: bool = False
    default_sort: SortDescriptor | None = None
    on_sort_change: Callable[[SortDescriptor], Any] | None = None


class PaginationConfig(_ConfigModel):
    enabled: bool = False
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    page_size_options: list[int] = Field(default_factory=lambda: list(DEFAULT_PAGE_SIZE_OPTIONS))
    server_side: bool = False
    total: int | None = Field(default=None, ge=0)
    on_page_change: Callable[[int], Any] | None = None
    on_page_size_change: Callable[[int], Any] | None = None

    @model_validator(mode="after")
    def _server_side_needs_total(self) -> PaginationConfig:
        if self.server_side and self.total is None:
            raise ValueError("pagination.server_side requires an authoritative total")
        return self


class CardsConfig(_ConfigModel):
    enabled: bool = False
    render_card: Callable[[Any], Any] | None = None


class TableConfig(_ConfigModel):
    """Full configuration of one table instance."""

    id: str = DEFAULT_TABLE_ID
    data: list[Any] = Field(default_factory=list)
    default_view_mode: ViewMode = ViewMode.TABLE
    on_view_mode_change: Callable[[ViewMode], Any] | None = None

    search: SearchConfig = Field(default_factory=SearchConfig)

    filters: list[FilterDescriptor] = Field(default_factory=list)
    on_filters_change: Callable[[dict[str, Any]], Any] | None = None

    sorting: SortingConfig = Field(default_factory=SortingConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    cards: CardsConfig = Field(default_factory=CardsConfig)

    get_row_id: Callable[[Any], str] | None = None
    on_row_selection_change: Callable[[list[Any]], Any] | None = None

    @model_validator(mode="after")
    def _check_contract(self) -> TableConfig:
        seen: set[str] = set()
        for descriptor in self.filters:
            if descriptor.key in seen:
                raise ValueError(f"duplicate filter key: {descriptor.key!r}")
            seen.add(descriptor.key)
        if self.on_row_selection_change is not None and self.get_row_id is None:
            raise ValueError("on_row_selection_change requires get_row_id")
        return self

    # -- derived, read-only ----------------------------------------------------

    @property
    def modes(self) -> ConcernModes:
        return ConcernModes(
            search=Mode.DELEGATED if self.search.on_search else Mode.LOCAL,
            filters=Mode.DELEGATED if self.on_filters_change else Mode.LOCAL,
            sort=Mode.DELEGATED if self.sorting.on_sort_change else Mode.LOCAL,
            pagination=Mode.DELEGATED if self.pagination.server_side else Mode.LOCAL,
        )

    @property
    def initial_filters(self) -> dict[str, Any]:
        """Active filter map before any user input: each descriptor's default."""
        return {f.key: f.default_value for f in self.filters if f.default_value is not None}

    @property
    def basic_filters(self) -> list[FilterDescriptor]:
        return [f for f in self.filters if not f.advanced]

    @property
    def advanced_filters(self) -> list[FilterDescriptor]:
        return [f for f in self.filters if f.advanced]

    def filter_descriptor(self, key: str) -> FilterDescriptor | None:
        for descriptor in self.filters:
            if descriptor.key == key:
                return descriptor
        return None
