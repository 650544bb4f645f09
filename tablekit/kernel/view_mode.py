"""
tablekit Kernel — View Mode Persistence

The only state that outlives a table instance: whether the user last looked
at a table as rows or as cards. One value per table id, last write wins.

Stores:
  MemoryViewModeStore   — dict, for tests and single-process hosts
  JsonFileViewModeStore — one JSON object on disk
  HttpViewModeStore     — the preferences service (backend/) over HTTP

ViewModePreference is what the engine actually talks to. It never raises:
a store that fails behaves like a store with nothing in it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from tablekit.kernel.types import ViewMode

logger = logging.getLogger(__name__)


def storage_key(table_id: str) -> str:
    return f"{table_id}-view-mode"


# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


class ViewModeStore:
    """
    Abstract key-value port for view modes.
    Implement with any durable backend; values are "table" or "cards".
    """

    def load(self, table_id: str) -> str | None:
        """Return the stored mode for a table, or None if nothing is stored."""
        raise NotImplementedError

    def save(self, table_id: str, mode: str) -> None:
        """Store the mode for a table, replacing any previous value."""
        raise NotImplementedError


class MemoryViewModeStore(ViewModeStore):
    """In-memory store. Shared between engines that are given the same instance."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def load(self, table_id: str) -> str | None:
        return self.values.get(storage_key(table_id))

    def save(self, table_id: str, mode: str) -> None:
        self.values[storage_key(table_id)] = mode


class JsonFileViewModeStore(ViewModeStore):
    """
    All view modes in a single JSON object:

        {"products-catalog-view-mode": "cards", "crm-table-view-mode": "table"}

    The file is read on every load, so separate processes see each other's writes.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path) as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def load(self, table_id: str) -> str | None:
        return self._read().get(storage_key(table_id))

    def save(self, table_id: str, mode: str) -> None:
        data = self._read()
        data[storage_key(table_id)] = mode
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2, sort_keys=True)


class HttpViewModeStore(ViewModeStore):
    """
    Talks to the preferences service: GET/PUT /api/tables/{table_id}/view-mode.

    Owns its httpx client; close it, or use the store as a context manager.
    """

    def __init__(
        self,
        api_url: str = "",
        token: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.client = client or httpx.Client(timeout=5.0)

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, table_id: str) -> str:
        return f"{self.api_url}/api/tables/{quote(table_id, safe='')}/view-mode"

    def load(self, table_id: str) -> str | None:
        res = self.client.get(self._url(table_id), headers=self._headers())
        res.raise_for_status()
        return res.json().get("view_mode")

    def save(self, table_id: str, mode: str) -> None:
        res = self.client.put(self._url(table_id), json={"view_mode": mode}, headers=self._headers())
        res.raise_for_status()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> HttpViewModeStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Engine-facing wrapper
# ---------------------------------------------------------------------------


class ViewModePreference:
    """
    One table's view mode preference on top of a store.

    Store failures are logged and swallowed; unknown stored values are ignored.
    """

    def __init__(self, store: ViewModeStore | None, table_id: str) -> None:
        self.store = store
        self.table_id = table_id

    def load(self) -> ViewMode | None:
        if self.store is None:
            return None
        try:
            raw = self.store.load(self.table_id)
        except Exception as e:
            logger.warning("view_mode: load failed for table_id=%s: %s", self.table_id, e)
            return None
        if raw is None:
            return None
        try:
            return ViewMode(raw)
        except ValueError:
            logger.warning("view_mode: ignoring unknown stored value %r for table_id=%s", raw, self.table_id)
            return None

    def save(self, mode: ViewMode) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.table_id, ViewMode(mode).value)
        except Exception as e:
            logger.warning("view_mode: save failed for table_id=%s: %s", self.table_id, e)
