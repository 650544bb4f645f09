"""
Pydantic models for the preference service.

All data shapes defined here. No imports from routes.
"""

from backend.models.view_mode import UpdateViewModeRequest, ViewModeResponse

__all__ = [
    "ViewModeResponse",
    "UpdateViewModeRequest",
]
