"""Reseller routes: overrides, bulk pricing, descriptions, AKT+ options, settings.

Every route requires the ``X-Reseller-Id`` and ``X-Reseller-Key`` headers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..db import catalog as catalog_db
from ..db import overrides as overrides_db
from ..models.catalog import ResellerOverride
from ..models.requests import (
    AddOnOverrideUpdate,
    BulkOverrideRequest,
    GlobalDescriptionsRequest,
    ImageUploadRequest,
    OverrideCreate,
    OverridePatch,
    ResellerSettingsUpdate,
    StageDescriptionUpdate,
)
from ..services import bulk_pricing, resellers
from ..services.bulk_pricing import BulkPricingResult
from .deps import get_reseller_id

router = APIRouter(prefix="/api")

ResellerId = Annotated[str, Depends(get_reseller_id)]


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


@router.get("/overrides", response_model=list[ResellerOverride])
async def list_overrides(reseller_id: ResellerId, brand: str | None = None):
    return await overrides_db.fetch_overrides(reseller_id, brand)


@router.get("/overrides/engine/{engine_id}", response_model=list[ResellerOverride])
async def list_engine_overrides(engine_id: str, reseller_id: ResellerId):
    return await overrides_db.fetch_engine_overrides(reseller_id, engine_id)


@router.post("/overrides", response_model=ResellerOverride, status_code=201)
async def create_override(body: OverrideCreate, reseller_id: ResellerId):
    return await resellers.create_override(reseller_id, body)


@router.patch("/overrides/{override_id}", response_model=ResellerOverride)
async def patch_override(override_id: str, body: OverridePatch, reseller_id: ResellerId):
    return await resellers.patch_override(reseller_id, override_id, body)


@router.post("/bulk-overrides", response_model=BulkPricingResult)
async def bulk_overrides(body: BulkOverrideRequest, reseller_id: ResellerId):
    """Set per-stage prices for every engine of a model.

    Prices are given in the reseller's currency and stored in SEK. With
    ``preview`` set, nothing is written.
    """
    return await bulk_pricing.apply_bulk_prices(
        reseller_id,
        body.brand,
        body.model,
        body.prices_by_stage(),
        year=body.year,
        preview=body.preview,
    )


@router.post("/global-descriptions")
async def save_global_descriptions(body: GlobalDescriptionsRequest, reseller_id: ResellerId):
    """Replace all global stage descriptions in one transaction."""
    return await bulk_pricing.replace_global_descriptions(reseller_id, body.descriptions)


# ---------------------------------------------------------------------------
# Stage descriptions & AKT+ options
# ---------------------------------------------------------------------------


@router.post("/stage-descriptions")
async def save_stage_description(body: StageDescriptionUpdate, reseller_id: ResellerId):
    return await resellers.save_stage_description(
        reseller_id, body.stage_name, body.description
    )


@router.get("/aktplus-overrides")
async def list_aktplus_overrides(reseller_id: ResellerId):
    return {"overrides": await catalog_db.fetch_addon_overrides(reseller_id)}


@router.post("/aktplus-overrides")
async def save_aktplus_override(body: AddOnOverrideUpdate, reseller_id: ResellerId):
    return await resellers.save_addon_override(reseller_id, body)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.post("/reseller/settings")
async def update_settings(body: ResellerSettingsUpdate, reseller_id: ResellerId):
    try:
        changes = await resellers.update_settings(reseller_id, body)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"success": True, "updated": changes}


@router.post("/reseller/logo")
async def upload_logo(body: ImageUploadRequest, reseller_id: ResellerId):
    try:
        return await resellers.upload_logo(reseller_id, body.image_data, body.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
