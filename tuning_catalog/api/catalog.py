"""Public catalog routes: brands, engine pages, reseller storefronts, AKT+ options."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from ..models.catalog import ResellerConfig
from ..models.embed import EmbedConfig
from ..models.pages import AddOnView, EnginePage
from ..models.requests import LanguagePreferenceUpdate
from ..services.catalog import CatalogService
from ..services.dyno import generate_dyno_curve, rpm_axis
from ..services.preferences import LanguagePreference
from .deps import get_catalog_service, get_language_preference

router = APIRouter(prefix="/api")

CatalogDep = Annotated[CatalogService, Depends(get_catalog_service)]


# ---------------------------------------------------------------------------
# Catalog tree
# ---------------------------------------------------------------------------


@router.get("/brands")
async def list_brands(catalog: CatalogDep, lang: str = "sv"):
    """All brands with their model names."""
    return {"brands": await catalog.list_brands(lang=lang)}


@router.get("/brands/{brand}")
async def get_brand(brand: str, catalog: CatalogDep, lang: str = "sv"):
    found = await catalog.get_brand(brand, lang)
    return {
        "name": found.name,
        "slug": found.slug,
        "logo_url": found.logo_url,
        "models": [
            {"name": m.name, "slug": m.slug, "image_url": m.image_url}
            for m in found.models
        ],
    }


@router.get("/brands/{brand}/{model}")
async def get_model(brand: str, model: str, catalog: CatalogDep, lang: str = "sv"):
    found_brand, found_model = await catalog.get_model(brand, model, lang)
    return {
        "brand": found_brand.name,
        "model": found_model.name,
        "image_url": found_model.image_url,
        "years": [{"range": y.range, "slug": y.slug} for y in found_model.years],
    }


@router.get("/brands/{brand}/{model}/{year}")
async def get_year(
    brand: str, model: str, year: str, catalog: CatalogDep, lang: str = "sv"
):
    found_brand, found_model, found_year = await catalog.get_year(brand, model, year, lang)
    return {
        "brand": found_brand.name,
        "model": found_model.name,
        "year": found_year.range,
        "engines": [
            {"id": e.id, "label": e.label, "slug": e.slug, "fuel": e.fuel}
            for e in found_year.engines
        ],
    }


@router.get("/brands/{brand}/{model}/{year}/{engine}", response_model=EnginePage)
async def get_engine_page(
    brand: str,
    model: str,
    year: str,
    engine: str,
    catalog: CatalogDep,
    stage: str | None = None,
    lang: str = "sv",
):
    """Engine page with stages, AKT+ options and dyno curves.

    ``stage`` selects the stage shown expanded (defaults to "Steg 1").
    """
    return await catalog.get_engine_page(brand, model, year, engine, stage=stage, lang=lang)


@router.get(
    "/brands/{brand}/{model}/{year}/{engine}/aktplus-options",
    response_model=list[AddOnView],
)
async def get_engine_aktplus_options(
    brand: str,
    model: str,
    year: str,
    engine: str,
    catalog: CatalogDep,
    lang: str = "sv",
    reseller_id: str | None = None,
):
    return await catalog.engine_aktplus_options(
        brand, model, year, engine, lang=lang, reseller_id=reseller_id
    )


# ---------------------------------------------------------------------------
# Reseller storefront
# ---------------------------------------------------------------------------


@router.get("/reseller/{reseller_id}/brands")
async def list_reseller_brands(reseller_id: str, catalog: CatalogDep, lang: str = "sv"):
    """Brands visible on a reseller's storefront (hidden makes removed)."""
    return {"brands": await catalog.list_brands(reseller_id, lang)}


@router.get("/reseller/{reseller_id}/config", response_model=ResellerConfig)
async def get_reseller_config(reseller_id: str, catalog: CatalogDep):
    return await catalog.reseller_config(reseller_id)


@router.get("/reseller/{reseller_id}/embed-config", response_model=EmbedConfig)
async def get_embed_config(reseller_id: str, catalog: CatalogDep):
    return await catalog.embed_config(reseller_id)


@router.get(
    "/reseller/{reseller_id}/{brand}/{model}/{year}/{engine}",
    response_model=EnginePage,
)
async def get_reseller_engine_page(
    reseller_id: str,
    brand: str,
    model: str,
    year: str,
    engine: str,
    catalog: CatalogDep,
    stage: str | None = None,
    lang: str = "sv",
):
    """Engine page with the reseller's overrides applied."""
    return await catalog.get_engine_page(
        brand, model, year, engine, stage=stage, lang=lang, reseller_id=reseller_id
    )


# ---------------------------------------------------------------------------
# AKT+ options & descriptions
# ---------------------------------------------------------------------------


@router.get("/aktplus-options", response_model=list[AddOnView])
async def list_aktplus_options(
    catalog: CatalogDep, lang: str = "sv", reseller_id: str | None = None
):
    return await catalog.aktplus_options(lang, reseller_id)


@router.get("/stage-descriptions")
async def list_stage_descriptions(
    catalog: CatalogDep, reseller_id: str | None = None, lang: str = "sv"
) -> dict[str, Any]:
    return await catalog.stage_descriptions(reseller_id, lang)


# ---------------------------------------------------------------------------
# Dyno curve
# ---------------------------------------------------------------------------


@router.get("/dyno")
async def get_dyno_curve(
    peak: Annotated[float, Query(ge=0, le=100000)],
    hp: bool = True,
    fuel: str | None = None,
):
    """Synthetic curve for one peak figure. Illustrative only."""
    return {
        "rpm": list(rpm_axis(fuel)),
        "values": generate_dyno_curve(peak, hp, fuel),
    }


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


@router.get("/preferences/{client_id}/language")
async def get_language(
    client_id: str,
    preference: Annotated[LanguagePreference, Depends(get_language_preference)],
):
    return {"client_id": client_id, "language": (await preference.get(client_id)).value}


@router.put("/preferences/{client_id}/language")
async def set_language(
    client_id: str,
    body: LanguagePreferenceUpdate,
    preference: Annotated[LanguagePreference, Depends(get_language_preference)],
):
    try:
        language = await preference.set(client_id, body.language)
    except ValueError:
        raise HTTPException(
            status_code=422, detail=f"Unsupported language: {body.language}"
        )
    return {"client_id": client_id, "language": language.value}
