"""
Pytest configuration and fixtures for preference service tests.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from backend.main import app
from backend.routes.view_modes import get_view_mode_store
from tablekit.kernel.view_mode import MemoryViewModeStore


@pytest.fixture
def view_mode_store():
    """Fresh in-memory store wired into the app for one test."""
    store = MemoryViewModeStore()
    app.dependency_overrides[get_view_mode_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_view_mode_store, None)


@pytest_asyncio.fixture
async def async_client(view_mode_store):
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
