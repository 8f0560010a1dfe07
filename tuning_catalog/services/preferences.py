"""Key-value persistence for small pieces of client state.

Import-run history and per-client language preference are kept behind a
``KeyValueStore`` so the services that need them take the store by
injection. ``SupabaseKeyValueStore`` persists to the ``kv_store`` table;
``InMemoryKeyValueStore`` is the fallback for tests and for deployments
without that table.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Protocol

from ..core.enums import Language
from ..db import kv

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store. Values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SupabaseKeyValueStore:
    """Store backed by the Supabase ``kv_store`` table (jsonb values).

    With a ``fallback`` store, the first failing call (missing table,
    unreachable database) switches this store over to the fallback for the
    rest of the process.
    """

    def __init__(self, namespace: str = "", fallback: KeyValueStore | None = None) -> None:
        self.namespace = namespace
        self.fallback = fallback
        self.unavailable = False

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    async def _call(self, operation: str, primary, *args: Any) -> Any:
        if self.unavailable and self.fallback is not None:
            return await getattr(self.fallback, operation)(*args)
        try:
            return await primary(self._key(args[0]), *args[1:])
        except Exception as e:
            if self.fallback is None:
                raise
            logger.warning(f"kv_store unavailable, using in-memory store: {e}")
            self.unavailable = True
            return await getattr(self.fallback, operation)(*args)

    async def get(self, key: str) -> Any | None:
        return await self._call("get", kv.kv_get, key)

    async def set(self, key: str, value: Any) -> None:
        await self._call("set", kv.kv_set, key, value)

    async def delete(self, key: str) -> None:
        await self._call("delete", kv.kv_delete, key)


def create_store(backend: str) -> KeyValueStore:
    """Build the store named by the PREFERENCES_BACKEND setting."""
    if backend == "memory":
        logger.info("Using in-memory preferences store")
        return InMemoryKeyValueStore()
    return SupabaseKeyValueStore(fallback=InMemoryKeyValueStore())


# -----------------------------------------------------------------------------
# Import history
# -----------------------------------------------------------------------------


class ImportHistory:
    """Most recent import runs, newest first."""

    KEY = "import_history"

    def __init__(self, store: KeyValueStore, max_entries: int = 50) -> None:
        self.store = store
        self.max_entries = max_entries

    async def entries(self) -> list[dict[str, Any]]:
        value = await self.store.get(self.KEY)
        return value if isinstance(value, list) else []

    async def record(self, kind: str, summary: dict[str, Any]) -> dict[str, Any]:
        entry = {
            "kind": kind,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **summary,
        }
        history = [entry, *await self.entries()][: self.max_entries]
        await self.store.set(self.KEY, history)
        return entry

    async def clear(self) -> None:
        await self.store.delete(self.KEY)


# -----------------------------------------------------------------------------
# Language preference
# -----------------------------------------------------------------------------


class LanguagePreference:
    """Per-client storefront language."""

    def __init__(self, store: KeyValueStore, default: Language = Language.SV) -> None:
        self.store = store
        self.default = default

    @staticmethod
    def _key(client_id: str) -> str:
        return f"language:{client_id}"

    async def get(self, client_id: str) -> Language:
        value = await self.store.get(self._key(client_id))
        if not value:
            return self.default
        return Language.from_string(str(value))

    async def set(self, client_id: str, language: str) -> Language:
        """Store a language; raises ValueError for unsupported languages."""
        selected = Language(language.strip().lower())
        await self.store.set(self._key(client_id), selected.value)
        return selected
