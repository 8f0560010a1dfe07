"""Shared Supabase client - single lazy-loaded instance for the entire app."""

import asyncio
import threading
import time
from typing import Any, Callable, TypeVar

from supabase import Client, create_client

from ..core.config import get_settings
from ..core.logging import log_db_query

_supabase: Client | None = None
_client_lock = threading.Lock()

T = TypeVar("T")


def get_supabase_client() -> Client:
    """Get or create the shared Supabase client (thread-safe)."""
    global _supabase
    if _supabase is None:
        with _client_lock:
            if _supabase is None:
                settings = get_settings()
                _supabase = create_client(settings.supabase_url, settings.supabase_key)
    return _supabase


async def run_query(operation: str, table: str, query: Callable[[Client], T]) -> T:
    """Run a synchronous Supabase call in a worker thread and log its duration."""
    start = time.time()
    client = get_supabase_client()
    try:
        result = await asyncio.to_thread(query, client)
    except Exception:
        log_db_query(operation, table, (time.time() - start) * 1000, success=False)
        raise
    log_db_query(operation, table, (time.time() - start) * 1000)
    return result


def rows(result: Any) -> list[dict[str, Any]]:
    """Extract the dict rows of a Supabase response, ignoring anything else."""
    data = getattr(result, "data", None)
    if not data or not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def first_row(result: Any) -> dict[str, Any] | None:
    found = rows(result)
    return found[0] if found else None
