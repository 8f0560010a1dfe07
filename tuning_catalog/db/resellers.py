"""Supabase operations for reseller accounts and storefront settings."""

import hmac
from typing import Any

from ..models.catalog import ResellerConfig
from .client import first_row, run_query
from .mapping import reseller_config_from_row

TABLE = "reseller_users"


async def fetch_reseller_config(reseller_id: str) -> ResellerConfig | None:
    result = await run_query(
        "select",
        TABLE,
        lambda c: c.table(TABLE)
        .select(
            "reseller_id, email, logo_url, currency, language, secondary_language, "
            "enable_language_switcher, hidden_makes, display_settings"
        )
        .eq("reseller_id", reseller_id)
        .limit(1)
        .execute(),
    )
    row = first_row(result)
    return reseller_config_from_row(row) if row else None


async def verify_reseller_key(reseller_id: str, api_key: str) -> bool:
    """Check a reseller API key against the stored one (constant-time)."""
    result = await run_query(
        "select_key",
        TABLE,
        lambda c: c.table(TABLE)
        .select("api_key")
        .eq("reseller_id", reseller_id)
        .limit(1)
        .execute(),
    )
    row = first_row(result)
    stored = str(row.get("api_key") or "") if row else ""
    return bool(stored) and hmac.compare_digest(stored, api_key)


async def update_reseller_settings(reseller_id: str, changes: dict[str, Any]) -> bool:
    """Patch a reseller's settings. Returns False when the reseller is unknown."""
    result = await run_query(
        "update",
        TABLE,
        lambda c: c.table(TABLE).update(changes).eq("reseller_id", reseller_id).execute(),
    )
    return first_row(result) is not None
