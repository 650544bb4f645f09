"""
Ready-made table configurations for the common screens.

Each preset returns a TableConfig; keyword overrides replace top-level fields:

    config = product_catalog_preset(products, get_row_id=lambda p: p["id"])
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from tablekit.kernel.config import TableConfig


def _build(base: dict[str, Any], overrides: dict[str, Any]) -> TableConfig:
    return TableConfig(**{**base, **overrides})


def basic_preset(data: Sequence[Any], **overrides: Any) -> TableConfig:
    """Search and pagination, no cards."""
    return _build(
        {
            "data": list(data),
            "search": {"enabled": True, "placeholder": "Search..."},
            "pagination": {"enabled": True, "page_size": 20},
        },
        overrides,
    )


def simple_preset(data: Sequence[Any], **overrides: Any) -> TableConfig:
    """Like basic_preset, with smaller pages."""
    return _build(
        {
            "data": list(data),
            "search": {"enabled": True, "placeholder": "Search..."},
            "pagination": {"enabled": True, "page_size": 10},
        },
        overrides,
    )


def crm_preset(
    data: Sequence[Any],
    *,
    render_card: Callable[[Any], Any] | None = None,
    type_options: Sequence[tuple[Any, str]] | None = None,
    **overrides: Any,
) -> TableConfig:
    """Customers, leads and contacts: search, optional type filter, newest first, cards."""
    filters = []
    if type_options:
        filters.append(
            {
                "key": "type",
                "label": "Type",
                "kind": "select",
                "options": [{"value": "all", "label": "All types"}]
                + [{"value": value, "label": label} for value, label in type_options],
                "default_value": "all",
            }
        )
    return _build(
        {
            "id": "crm-table",
            "data": list(data),
            "search": {"enabled": True, "placeholder": "Search by name, email, company..."},
            "filters": filters,
            "sorting": {"enabled": True, "default_sort": {"field": "created_at", "order": "desc"}},
            "pagination": {"enabled": True, "page_size": 20},
            "cards": {"enabled": True, "render_card": render_card},
        },
        overrides,
    )


def product_catalog_preset(
    data: Sequence[Any],
    *,
    render_card: Callable[[Any], Any] | None = None,
    **overrides: Any,
) -> TableConfig:
    """Product catalog: type and stock filters, sorted by name, cards."""
    return _build(
        {
            "id": "products-catalog",
            "data": list(data),
            "search": {"enabled": True, "placeholder": "Search by name, SKU or description..."},
            "filters": [
                {
                    "key": "type",
                    "label": "Type",
                    "kind": "select",
                    "options": [
                        {"value": "all", "label": "All types"},
                        {"value": "product", "label": "Products"},
                        {"value": "service", "label": "Services"},
                        {"value": "combo", "label": "Combos"},
                    ],
                    "default_value": "all",
                },
                {
                    "key": "stock",
                    "label": "Stock",
                    "kind": "select",
                    "options": [
                        {"value": "all", "label": "All"},
                        {"value": "in_stock", "label": "In stock"},
                        {"value": "low_stock", "label": "Low stock"},
                        {"value": "out_of_stock", "label": "Out of stock"},
                    ],
                    "default_value": "all",
                },
            ],
            "sorting": {"enabled": True, "default_sort": {"field": "name", "order": "asc"}},
            "pagination": {"enabled": True, "page_size": 20},
            "cards": {"enabled": True, "render_card": render_card},
        },
        overrides,
    )
