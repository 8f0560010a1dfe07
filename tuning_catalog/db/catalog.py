"""Supabase catalog operations - brands tree, AKT+ options, stage descriptions."""

from typing import Any

from ..models.catalog import (
    AddOn,
    Brand,
    ResellerAddOnOverride,
    StageDescription,
    VehicleModel,
)
from ..utils.text import names_match, slugify
from .client import first_row, rows, run_query
from .mapping import (
    addon_from_row,
    addon_override_from_row,
    brand_from_row,
    models_to_raw,
    stage_description_from_row,
)

BRAND_COLUMNS = "id, name, slug, logo_url, models"


# -----------------------------------------------------------------------------
# Brands
# -----------------------------------------------------------------------------


async def fetch_brands() -> list[Brand]:
    """Fetch every brand with its full model tree, ordered by name."""
    result = await run_query(
        "select",
        "brands",
        lambda c: c.table("brands").select(BRAND_COLUMNS).order("name").execute(),
    )
    return [brand_from_row(row) for row in rows(result)]


async def fetch_brand(identifier: str) -> Brand | None:
    """Fetch one brand by slug, falling back to a case-insensitive name match."""
    result = await run_query(
        "select_by_slug",
        "brands",
        lambda c: c.table("brands")
        .select(BRAND_COLUMNS)
        .eq("slug", identifier.lower())
        .limit(1)
        .execute(),
    )
    row = first_row(result)
    if row:
        return brand_from_row(row)

    for brand in await fetch_brands():
        if names_match(brand.name, identifier) or brand.slug == slugify(identifier):
            return brand
    return None


async def save_brand_models(brand_id: str, models: list[VehicleModel]) -> None:
    """Write back a brand's model tree (last write wins)."""
    payload = {"models": models_to_raw(models)}
    await run_query(
        "update_models",
        "brands",
        lambda c: c.table("brands").update(payload).eq("id", brand_id).execute(),
    )


# -----------------------------------------------------------------------------
# AKT+ options
# -----------------------------------------------------------------------------


async def fetch_addons() -> list[AddOn]:
    result = await run_query(
        "select",
        "aktplus_options",
        lambda c: c.table("aktplus_options").select("*").execute(),
    )
    return [addon_from_row(row) for row in rows(result) if row.get("id")]


async def fetch_addon_overrides(reseller_id: str) -> list[ResellerAddOnOverride]:
    result = await run_query(
        "select",
        "reseller_aktplus_overrides",
        lambda c: c.table("reseller_aktplus_overrides")
        .select("*")
        .eq("reseller_id", reseller_id)
        .execute(),
    )
    return [addon_override_from_row(row) for row in rows(result)]


async def upsert_addon_override(
    reseller_id: str, addon_id: str, payload: dict[str, Any]
) -> None:
    """Create or update the reseller's override of one AKT+ option."""
    record = {
        "id": f"aktplus-{slugify(reseller_id)}-{slugify(addon_id)}",
        "reseller_id": reseller_id,
        "addon_id": addon_id,
        **payload,
    }
    await run_query(
        "upsert",
        "reseller_aktplus_overrides",
        lambda c: c.table("reseller_aktplus_overrides").upsert(record).execute(),
    )


# -----------------------------------------------------------------------------
# Stage descriptions
# -----------------------------------------------------------------------------


async def fetch_stage_descriptions() -> list[StageDescription]:
    result = await run_query(
        "select",
        "stage_descriptions",
        lambda c: c.table("stage_descriptions").select("*").execute(),
    )
    return [d for d in map(stage_description_from_row, rows(result)) if d]


async def fetch_reseller_stage_descriptions(reseller_id: str) -> list[StageDescription]:
    result = await run_query(
        "select",
        "reseller_stage_descriptions",
        lambda c: c.table("reseller_stage_descriptions")
        .select("*")
        .eq("reseller_id", reseller_id)
        .execute(),
    )
    return [d for d in map(stage_description_from_row, rows(result)) if d]


async def upsert_reseller_stage_description(
    reseller_id: str, stage_name: str, description: Any
) -> None:
    record = {
        "id": f"stage-{slugify(reseller_id)}-{slugify(stage_name)}",
        "reseller_id": reseller_id,
        "stage_name": stage_name,
        "description": description,
    }
    await run_query(
        "upsert",
        "reseller_stage_descriptions",
        lambda c: c.table("reseller_stage_descriptions").upsert(record).execute(),
    )
