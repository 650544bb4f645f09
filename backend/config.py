"""
tablekit preference service configuration — all environment variables in one place.

Read from environment at runtime. Nothing here is required: without
VIEW_MODE_STORE_PATH the service keeps view modes in memory.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # View mode storage (JSON file); empty means in-memory
    VIEW_MODE_STORE_PATH: str = os.environ.get("VIEW_MODE_STORE_PATH", "")

    # Table ids accepted in URLs
    TABLE_ID_PATTERN: str = r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


# Singleton instance
settings = Settings()
