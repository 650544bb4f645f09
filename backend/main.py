"""
tablekit preference service.

Entry point for the API server. Serves the view mode store over HTTP so
HttpViewModeStore can keep a user's table layouts across devices.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import settings
from backend.routes import view_modes as view_mode_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Configures logging and resolves the view mode store up front so a bad
    VIEW_MODE_STORE_PATH shows up at startup rather than on first request.
    """
    logging.basicConfig(level=settings.LOG_LEVEL)
    view_mode_routes.get_view_mode_store()
    logger.info("Preference service started (environment=%s)", settings.ENVIRONMENT)

    yield

    logger.info("Preference service stopped")


app = FastAPI(
    title="tablekit preferences",
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(view_mode_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
