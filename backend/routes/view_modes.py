"""Per-table view mode preference routes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path

from backend.config import settings
from backend.models.view_mode import UpdateViewModeRequest, ViewModeResponse
from tablekit.kernel.types import ViewMode
from tablekit.kernel.view_mode import JsonFileViewModeStore, MemoryViewModeStore, ViewModeStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tables", tags=["view_modes"])

_store: ViewModeStore | None = None


def get_view_mode_store() -> ViewModeStore:
    """JSON file store when VIEW_MODE_STORE_PATH is set, in-memory otherwise."""
    global _store
    if _store is None:
        if settings.VIEW_MODE_STORE_PATH:
            _store = JsonFileViewModeStore(settings.VIEW_MODE_STORE_PATH)
        else:
            _store = MemoryViewModeStore()
        logger.info("view_modes: using %s", type(_store).__name__)
    return _store


# Handlers are sync: stores do blocking I/O and run in the threadpool.
TableId = Annotated[str, Path(pattern=settings.TABLE_ID_PATTERN)]


@router.get("/{table_id}/view-mode")
def get_view_mode(
    table_id: TableId,
    store: ViewModeStore = Depends(get_view_mode_store),
) -> ViewModeResponse:
    """Stored view mode for a table; view_mode is null when nothing was stored."""
    raw = store.load(table_id)
    try:
        mode = ViewMode(raw) if raw is not None else None
    except ValueError:
        logger.warning("view_modes: ignoring unknown stored value %r for table_id=%s", raw, table_id)
        mode = None
    return ViewModeResponse(table_id=table_id, view_mode=mode)


@router.put("/{table_id}/view-mode")
def put_view_mode(
    request: UpdateViewModeRequest,
    table_id: TableId,
    store: ViewModeStore = Depends(get_view_mode_store),
) -> ViewModeResponse:
    """Store a table's view mode. Last write wins."""
    store.save(table_id, request.view_mode.value)
    logger.info("view_modes: table_id=%s set to %s", table_id, request.view_mode.value)
    return ViewModeResponse(table_id=table_id, view_mode=request.view_mode)
