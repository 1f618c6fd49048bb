"""Single-slot key/value backends for draft snapshots."""

from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Protocol

import httpx
from postgrest import APIError

from election_wizard.config import Settings, settings
from election_wizard.utils.errors import ConfigurationError, StorageError
from election_wizard.utils.supabase_client import get_service_client
from election_wizard.utils.time import now_utc
from supabase import Client

logger = logging.getLogger(__name__)


class ScratchStorage(Protocol):
    """Key/value store holding serialized snapshots.

    Implementations raise ``StorageError`` for any I/O failure.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryScratchStorage:
    """Process-local storage, mainly for tests and embedded hosts."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileScratchStorage:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot delete {path}: {exc}") from exc


class SupabaseScratchStorage:
    """Slots stored as rows of a Supabase table keyed by ``slot_key``."""

    def __init__(self, client: Client, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.supabase_autosave_table

    def execute(self, query) -> Any:
        """Execute a Supabase query and normalize transport errors."""
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            message = getattr(exc, "message", None) or "Database request failed"
            raise StorageError(str(message)) from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Supabase request failed: {exc}") from exc
        logger.debug("Supabase slot query %.1fms", (time.perf_counter() - started) * 1000)
        return response.data

    def get(self, key: str) -> str | None:
        rows = self.execute(
            self.client.table(self.table).select("payload").eq("slot_key", key).limit(1)
        )
        if not rows:
            return None
        return rows[0].get("payload")

    def set(self, key: str, value: str) -> None:
        self.execute(
            self.client.table(self.table).upsert(
                {"slot_key": key, "payload": value, "updated_at": now_utc().isoformat()},
                on_conflict="slot_key",
            )
        )

    def delete(self, key: str) -> None:
        self.execute(self.client.table(self.table).delete().eq("slot_key", key))


def build_scratch_storage(config: Settings | None = None) -> ScratchStorage:
    """Create the backend named by ``storage_backend``."""
    config = config or settings
    backend = config.storage_backend.lower()
    if backend == "memory":
        return InMemoryScratchStorage()
    if backend == "file":
        return FileScratchStorage(config.storage_dir)
    if backend == "supabase":
        return SupabaseScratchStorage(
            get_service_client(config), table=config.supabase_autosave_table
        )
    raise ConfigurationError(f"Unknown storage backend: {config.storage_backend}")
