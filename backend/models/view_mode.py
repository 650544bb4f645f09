"""View mode preference models."""

from __future__ import annotations

from pydantic import BaseModel

from tablekit.kernel.types import ViewMode


class ViewModeResponse(BaseModel):
    """What GET/PUT /api/tables/{table_id}/view-mode return."""

    table_id: str
    view_mode: ViewMode | None = None


class UpdateViewModeRequest(BaseModel):
    """What the client sends to store a table's view mode."""

    model_config = {"extra": "forbid"}

    view_mode: ViewMode
