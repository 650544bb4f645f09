"""
Configuration Tests

TableConfig validation and the values the engine derives from it.
"""

import pytest
from pydantic import ValidationError

from tablekit.kernel.config import TableConfig
from tablekit.kernel.types import Mode, SortDescriptor, SortOrder, ViewMode


class TestDefaults:
    def test_empty_config(self):
        config = TableConfig()
        assert config.id == "table"
        assert config.default_view_mode == ViewMode.TABLE
        assert config.search.debounce_ms == 300
        assert config.pagination.page_size == 20
        assert config.pagination.page_size_options == [10, 20, 50, 100]
        assert config.sorting.default_sort is None

    def test_all_concerns_local_without_handlers(self):
        modes = TableConfig().modes
        assert (modes.search, modes.filters, modes.sort, modes.pagination) == (Mode.LOCAL,) * 4

    def test_handlers_make_concerns_delegated(self):
        config = TableConfig(
            search={"on_search": print},
            on_filters_change=print,
            sorting={"on_sort_change": print},
            pagination={"server_side": True, "total": 10},
        )
        modes = config.modes
        assert modes.is_delegated("search")
        assert modes.is_delegated("filters")
        assert modes.is_delegated("sort")
        assert modes.is_delegated("pagination")

    def test_default_sort_from_dict(self):
        config = TableConfig(sorting={"default_sort": {"field": "created_at", "order": "desc"}})
        assert config.sorting.default_sort == SortDescriptor("created_at", SortOrder.DESC)


class TestFilters:
    def test_initial_filters_skip_missing_defaults(self):
        config = TableConfig(filters=[{"key": "type", "default_value": "all"}, {"key": "stock"}])
        assert config.initial_filters == {"type": "all"}

    def test_basic_and_advanced(self):
        config = TableConfig(filters=[{"key": "type"}, {"key": "created", "kind": "dateRange", "advanced": True}])
        assert [f.key for f in config.basic_filters] == ["type"]
        assert [f.key for f in config.advanced_filters] == ["created"]
        assert config.filter_descriptor("created").kind.value == "dateRange"
        assert config.filter_descriptor("missing") is None

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValidationError, match="duplicate filter key"):
            TableConfig(filters=[{"key": "type"}, {"key": "type"}])


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_view_mode": "grid"},
            {"search": {"debounce_ms": -1}},
            {"pagination": {"page_size": 0}},
            {"pagination": {"server_side": True}},
            {"pagination": {"total": -5}},
            {"filters": [{"key": "x", "kind": "slider"}]},
            {"unknown_option": True},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            TableConfig(**kwargs)

    def test_selection_callback_needs_identity(self):
        with pytest.raises(ValidationError, match="get_row_id"):
            TableConfig(on_row_selection_change=print)
