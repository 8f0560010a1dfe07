"""Reseller write operations: overrides, descriptions, AKT+ options, settings."""

import logging
from typing import Any

from ..core.enums import EXCHANGE_RATES, Language
from ..core.exceptions import (
    CatalogNotFoundError,
    InvalidOverrideError,
    OverrideConflictError,
)
from ..db import assets
from ..db import catalog as catalog_db
from ..db import overrides as overrides_db
from ..db import resellers as resellers_db
from ..models.catalog import DisplaySettings, ResellerOverride
from ..models.requests import (
    AddOnOverrideUpdate,
    OverrideCreate,
    OverridePatch,
    ResellerSettingsUpdate,
)
from ..utils.text import text_to_blocks
from .overrides import override_document_id, scope_tier

logger = logging.getLogger(__name__)


async def canonical_engine(override: ResellerOverride) -> None:
    """Fill in both the engine label and the engine id of a fully qualified scope.

    Left as given when the catalog has no such engine.
    """
    brand = await catalog_db.fetch_brand(override.brand)
    if brand is None:
        return
    for model in brand.models:
        if model.name != override.model:
            continue
        for year in model.years:
            if year.range != override.year:
                continue
            for engine in year.engines:
                if engine.label == override.engine or (
                    override.engine_ref is not None and engine.id == override.engine_ref
                ):
                    override.engine = engine.label
                    override.engine_ref = engine.id
                    return


async def conflicting_overrides(
    reseller_id: str, override: ResellerOverride, tier: str
) -> list[ResellerOverride]:
    """Stored overrides covering the same scope, matching the engine by label or id."""
    scope: dict[str, str | None] = {
        "brand": override.brand,
        "model": override.model,
        "year": override.year,
        "stage_name": override.stage_name,
    }
    if tier != "full":
        return await overrides_db.find_scope_overrides(
            reseller_id, {**scope, "engine": None, "engine_ref": None}
        )

    found: dict[str | None, ResellerOverride] = {}
    if override.engine is not None:
        for o in await overrides_db.find_scope_overrides(
            reseller_id, {**scope, "engine": override.engine}
        ):
            found[o.id] = o
    if override.engine_ref is not None:
        for o in await overrides_db.find_scope_overrides(
            reseller_id, {**scope, "engine_ref": override.engine_ref}
        ):
            found[o.id] = o
    return list(found.values())


async def create_override(reseller_id: str, body: OverrideCreate) -> ResellerOverride:
    """Create an override for a scope that has none yet.

    Raises:
        InvalidOverrideError: the scope matches no specificity tier
        OverrideConflictError: an override for the same scope exists
    """
    override = ResellerOverride(reseller_id=reseller_id, **body.model_dump())
    tier = scope_tier(override)
    if tier is None:
        raise InvalidOverrideError(
            "Override scope must be brand, brand+model, brand+year or "
            "brand+model+year+engine",
            brand=override.brand,
            model=override.model,
            year=override.year,
            engine=override.engine,
        )

    if tier == "full":
        await canonical_engine(override)
    existing = await conflicting_overrides(reseller_id, override, tier)
    if existing:
        raise OverrideConflictError(
            "An override for this scope already exists",
            override_id=existing[0].id,
        )

    override.id = override_document_id(
        reseller_id,
        override.brand,
        override.model,
        override.year,
        override.engine or override.engine_ref,
        override.stage_name,
    )
    created = await overrides_db.insert_override(override)
    logger.info(f"Created {tier} override {created.id} for reseller={reseller_id}")
    return created


async def patch_override(
    reseller_id: str, override_id: str, patch: OverridePatch
) -> ResellerOverride:
    """Change the values of one of the reseller's overrides; scope is fixed."""
    current = await overrides_db.fetch_override(override_id)
    if current is None or current.reseller_id != reseller_id:
        raise CatalogNotFoundError("Override not found", override_id=override_id)

    changes = patch.model_dump(exclude_unset=True)
    if not changes:
        return current
    updated = await overrides_db.update_override(override_id, changes)
    return updated or current.model_copy(update=changes)


async def save_addon_override(
    reseller_id: str, body: AddOnOverrideUpdate
) -> dict[str, Any]:
    """Store a reseller's title/description/price for one AKT+ option.

    Text is stored under the editor's language; a plain-text description is
    wrapped into a portable-text block.
    """
    description = (
        text_to_blocks(body.description)
        if isinstance(body.description, str) and body.description.strip()
        else body.description or None
    )
    payload: dict[str, Any] = {
        "title": {body.lang: body.title} if body.title else None,
        "description": {body.lang: description} if description else None,
        "price": body.price,
    }
    if body.asset_url:
        payload["gallery"] = [{"url": body.asset_url}]
    await catalog_db.upsert_addon_override(reseller_id, body.addon_id, payload)
    return {"addon_id": body.addon_id, **payload}


async def save_stage_description(
    reseller_id: str, stage_name: str, description: Any
) -> dict[str, Any]:
    await catalog_db.upsert_reseller_stage_description(reseller_id, stage_name, description)
    return {"stage_name": stage_name, "description": description}


def settings_changes(
    update: ResellerSettingsUpdate, current: DisplaySettings
) -> dict[str, Any]:
    """Validate a settings update and turn it into column changes.

    Raises:
        ValueError: unsupported currency or language
    """
    changes = update.model_dump(exclude_unset=True, exclude={"display_settings"})
    if "currency" in changes and changes["currency"] is not None:
        currency = changes["currency"].upper()
        if currency not in EXCHANGE_RATES:
            raise ValueError(f"Unsupported currency: {changes['currency']}")
        changes["currency"] = currency
    for field in ("language", "secondary_language"):
        if changes.get(field) is not None:
            changes[field] = Language(changes[field].lower()).value
    if update.display_settings is not None:
        changes["display_settings"] = current.model_copy(
            update={
                k: v
                for k, v in update.display_settings.items()
                if k in DisplaySettings.model_fields
            }
        ).model_dump()
    return changes


async def update_settings(reseller_id: str, update: ResellerSettingsUpdate) -> dict[str, Any]:
    config = await resellers_db.fetch_reseller_config(reseller_id)
    if config is None:
        raise CatalogNotFoundError("Reseller not found", reseller_id=reseller_id)
    changes = settings_changes(update, config.display_settings)
    if changes:
        await resellers_db.update_reseller_settings(reseller_id, changes)
    return changes


async def upload_logo(reseller_id: str, image_data: str, filename: str) -> dict[str, str]:
    uploaded = await assets.upload_image(image_data, filename, folder="reseller-logos")
    if not await resellers_db.update_reseller_settings(
        reseller_id, {"logo_url": uploaded["url"]}
    ):
        raise CatalogNotFoundError("Reseller not found", reseller_id=reseller_id)
    return uploaded
