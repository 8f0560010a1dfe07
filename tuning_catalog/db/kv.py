"""Supabase ``kv_store`` table backing the preferences store."""

from typing import Any

from .client import first_row, run_query

TABLE = "kv_store"


async def kv_get(key: str) -> Any | None:
    result = await run_query(
        "select",
        TABLE,
        lambda c: c.table(TABLE).select("value").eq("key", key).limit(1).execute(),
    )
    row = first_row(result)
    return row.get("value") if row else None


async def kv_set(key: str, value: Any) -> None:
    await run_query(
        "upsert",
        TABLE,
        lambda c: c.table(TABLE).upsert({"key": key, "value": value}).execute(),
    )


async def kv_delete(key: str) -> None:
    await run_query(
        "delete", TABLE, lambda c: c.table(TABLE).delete().eq("key", key).execute()
    )
