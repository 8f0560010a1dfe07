"""Supabase operations for reseller override documents.

Bulk edits and global description saves go through the
``replace_reseller_overrides`` Postgres function, which deletes and inserts
in a single transaction. Every other write is a plain insert/update.
"""

from typing import Any

from ..models.catalog import ResellerOverride
from .client import first_row, rows, run_query
from .mapping import override_from_row, override_to_row

TABLE = "reseller_overrides"
SCOPE_FIELDS = ("brand", "model", "year", "engine", "engine_ref", "stage_name")


async def fetch_overrides(
    reseller_id: str, brand: str | None = None
) -> list[ResellerOverride]:
    """Fetch a reseller's price/figure overrides, optionally for one brand.

    Global description documents are excluded; see ``fetch_global_descriptions``.
    """

    def _query(c):
        query = (
            c.table(TABLE)
            .select("*")
            .eq("reseller_id", reseller_id)
            .eq("is_global_description", False)
        )
        if brand is not None:
            query = query.eq("brand", brand)
        return query.execute()

    result = await run_query("select", TABLE, _query)
    return [override_from_row(row) for row in rows(result)]


async def fetch_engine_overrides(
    reseller_id: str, engine_id: str
) -> list[ResellerOverride]:
    """Overrides that reference one engine document directly."""
    result = await run_query(
        "select_by_engine",
        TABLE,
        lambda c: c.table(TABLE)
        .select("*")
        .eq("reseller_id", reseller_id)
        .eq("engine_ref", engine_id)
        .execute(),
    )
    return [override_from_row(row) for row in rows(result)]


async def fetch_global_descriptions(reseller_id: str) -> list[ResellerOverride]:
    result = await run_query(
        "select_global_descriptions",
        TABLE,
        lambda c: c.table(TABLE)
        .select("*")
        .eq("reseller_id", reseller_id)
        .eq("is_global_description", True)
        .execute(),
    )
    return [override_from_row(row) for row in rows(result)]


async def fetch_override(override_id: str) -> ResellerOverride | None:
    result = await run_query(
        "select_by_id",
        TABLE,
        lambda c: c.table(TABLE).select("*").eq("id", override_id).limit(1).execute(),
    )
    row = first_row(result)
    return override_from_row(row) if row else None


async def find_scope_overrides(
    reseller_id: str, scope: dict[str, str | None]
) -> list[ResellerOverride]:
    """Find overrides whose scope fields equal ``scope`` (None = null).

    Scope fields missing from ``scope`` are not filtered on.
    """

    def _query(c):
        query = (
            c.table(TABLE)
            .select("*")
            .eq("reseller_id", reseller_id)
            .eq("is_global_description", False)
        )
        for field in SCOPE_FIELDS:
            if field not in scope:
                continue
            value = scope[field]
            query = query.is_(field, "null") if value is None else query.eq(field, value)
        return query.execute()

    result = await run_query("select_by_scope", TABLE, _query)
    return [override_from_row(row) for row in rows(result)]


async def insert_override(override: ResellerOverride) -> ResellerOverride:
    record = override_to_row(override)
    result = await run_query(
        "insert", TABLE, lambda c: c.table(TABLE).insert(record).execute()
    )
    row = first_row(result)
    return override_from_row(row) if row else override


async def update_override(override_id: str, changes: dict[str, Any]) -> ResellerOverride | None:
    result = await run_query(
        "update",
        TABLE,
        lambda c: c.table(TABLE).update(changes).eq("id", override_id).execute(),
    )
    row = first_row(result)
    return override_from_row(row) if row else None


async def replace_overrides(
    reseller_id: str,
    delete_ids: list[str],
    documents: list[ResellerOverride],
) -> int:
    """Atomically delete ``delete_ids`` and insert ``documents``.

    Returns the number of documents written.
    """
    params = {
        "p_reseller_id": reseller_id,
        "p_delete_ids": delete_ids,
        "p_documents": [override_to_row(doc) for doc in documents],
    }
    await run_query(
        "replace",
        TABLE,
        lambda c: c.rpc("replace_reseller_overrides", params).execute(),
    )
    return len(documents)
