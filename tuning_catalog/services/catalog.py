"""Catalog page assembly.

Route slugs are resolved to brand/model/year/engine, reseller overrides are
composed over the base stages, and each stage is decorated with its AKT+
options, a synthetic dyno chart, a plain-text description and a contact deep
link. Content-store failures on page routes are logged and reported as
"information missing" rather than leaking backend errors to visitors.
"""

import logging
from typing import Any, Awaitable, TypeVar

from ..core.config import Settings, get_settings
from ..core.enums import DEFAULT_CURRENCY, IMPORT_SEED_STAGE
from ..core.exceptions import CatalogError, CatalogNotFoundError
from ..core.logging import log_error
from ..db import catalog as catalog_db
from ..db import overrides as overrides_db
from ..db import resellers as resellers_db
from ..models.catalog import AddOn, Brand, Engine, ResellerConfig, VehicleModel, Year
from ..models.embed import EmbedConfig
from ..models.pages import AddOnView, BrandSummary, EnginePage, StageView
from ..utils.text import names_match, plain_text, slugify, slugify_stage, slugs_match
from ..utils.translations import t
from . import addons
from .bulk_pricing import exchange_rate, from_sek
from .dyno import build_dyno_chart
from .overrides import global_description_map, resolve_engine

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Slug resolution
# -----------------------------------------------------------------------------


def _not_found(lang: str, **details: Any) -> CatalogNotFoundError:
    return CatalogNotFoundError(t(lang, "informationMissing"), **details)


async def or_not_found(
    awaitable: Awaitable[T], lang: str, message: str, **details: Any
) -> T:
    """Await a content-store read; failures are logged and reported as not found."""
    try:
        return await awaitable
    except CatalogError:
        raise
    except Exception as e:
        log_error(message, e, **details)
        raise _not_found(lang) from e


def find_model(brand: Brand, slug: str, lang: str = "sv") -> VehicleModel:
    for model in brand.models:
        if model.slug == slug or slugs_match(model.name, slug):
            return model
    raise _not_found(lang, brand=brand.name, model=slug)


def find_year(model: VehicleModel, slug: str, lang: str = "sv") -> Year:
    for year in model.years:
        if year.slug == slug or slugify(year.range) == slugify(slug):
            return year
    raise _not_found(lang, model=model.name, year=slug)


def find_engine(year: Year, slug: str, lang: str = "sv") -> Engine:
    for engine in year.engines:
        if engine.slug == slug or engine.id == slug or slugs_match(engine.label, slug):
            return engine
    raise _not_found(lang, year=year.range, engine=slug)


def is_hidden(brand: Brand, config: ResellerConfig | None) -> bool:
    if config is None:
        return False
    return any(names_match(brand.name, hidden) for hidden in config.hidden_makes)


def brand_summaries(
    brands: list[Brand], config: ResellerConfig | None = None
) -> list[BrandSummary]:
    return [
        BrandSummary(
            name=b.name,
            slug=b.slug,
            logo_url=b.logo_url,
            models=[m.name for m in b.models],
        )
        for b in brands
        if not is_hidden(b, config)
    ]


def contact_link(
    base_url: str,
    path: list[str],
    anchor: str,
    reseller_id: str | None = None,
) -> str:
    """Deep link back to a stage on the page the visitor was viewing."""
    prefix = f"/reseller/{reseller_id}" if reseller_id else ""
    return f"{base_url.rstrip('/')}{prefix}/{'/'.join(path)}#{anchor}"


def display_price(price: float | None, config: ResellerConfig | None) -> float | None:
    """Price as shown to visitors; storefronts convert SEK to their currency."""
    if price is None or config is None:
        return price
    return from_sek(price, config.currency)


def is_expanded(stage_name: str, requested: str | None) -> bool:
    if requested:
        return stage_name == requested or slugify_stage(stage_name) == slugify_stage(requested)
    return stage_name == IMPORT_SEED_STAGE


# -----------------------------------------------------------------------------
# Service
# -----------------------------------------------------------------------------


class CatalogService:
    """Read side of the catalog: brand lists, engine pages, reseller views."""

    def __init__(
        self,
        settings: Settings | None = None,
        addon_cache: addons.AddOnCatalogCache | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.addon_cache = addon_cache or addons.AddOnCatalogCache(
            ttl=self.settings.addon_cache_ttl
        )

    async def addon_catalog(self) -> list[AddOn]:
        return await self.addon_cache.get_or_load(catalog_db.fetch_addons)

    async def list_brands(
        self, reseller_id: str | None = None, lang: str = "sv"
    ) -> list[BrandSummary]:
        config = await self.reseller_config(reseller_id, lang) if reseller_id else None
        brands = await or_not_found(
            catalog_db.fetch_brands(), lang, "Brand list failed", reseller_id=reseller_id
        )
        return brand_summaries(brands, config)

    async def get_brand(self, brand_slug: str, lang: str = "sv") -> Brand:
        try:
            brand = await catalog_db.fetch_brand(brand_slug)
        except Exception as e:
            log_error("Brand fetch failed", e, brand=brand_slug)
            raise _not_found(lang, brand=brand_slug) from e
        if brand is None:
            raise _not_found(lang, brand=brand_slug)
        return brand

    async def get_model(
        self, brand_slug: str, model_slug: str, lang: str = "sv"
    ) -> tuple[Brand, VehicleModel]:
        brand = await self.get_brand(brand_slug, lang)
        return brand, find_model(brand, model_slug, lang)

    async def get_year(
        self, brand_slug: str, model_slug: str, year_slug: str, lang: str = "sv"
    ) -> tuple[Brand, VehicleModel, Year]:
        brand, model = await self.get_model(brand_slug, model_slug, lang)
        return brand, model, find_year(model, year_slug, lang)

    async def reseller_config(self, reseller_id: str, lang: str = "sv") -> ResellerConfig:
        """Reseller settings; unknown resellers are not found."""
        try:
            config = await resellers_db.fetch_reseller_config(reseller_id)
        except Exception as e:
            log_error("Reseller config fetch failed", e, reseller_id=reseller_id)
            raise _not_found(lang, reseller_id=reseller_id) from e
        if config is None:
            raise _not_found(lang, reseller_id=reseller_id)
        return config

    async def embed_config(self, reseller_id: str) -> EmbedConfig:
        config = await self.reseller_config(reseller_id)
        return EmbedConfig(
            reseller_id=config.reseller_id,
            logo_url=config.logo_url,
            language=config.language,
            secondary_language=config.secondary_language,
            enable_language_switcher=config.enable_language_switcher,
            currency=config.currency,
            exchange_rate=exchange_rate(config.currency),
            hidden_makes=config.hidden_makes,
            show_dyno_chart=config.display_settings.show_dyno_chart,
        )

    async def addon_overrides(self, reseller_id: str | None) -> dict[str, Any]:
        if not reseller_id:
            return {}
        return addons.override_map(await catalog_db.fetch_addon_overrides(reseller_id))

    async def aktplus_options(
        self, lang: str = "sv", reseller_id: str | None = None
    ) -> list[AddOnView]:
        overrides = await or_not_found(
            self.addon_overrides(reseller_id), lang, "AKT+ overrides failed",
            reseller_id=reseller_id,
        )
        options = await or_not_found(self.addon_catalog(), lang, "AKT+ options failed")
        return [addons.to_view(option, lang, overrides.get(option.id)) for option in options]

    async def engine_aktplus_options(
        self,
        brand_slug: str,
        model_slug: str,
        year_slug: str,
        engine_slug: str,
        lang: str = "sv",
        reseller_id: str | None = None,
    ) -> list[AddOnView]:
        """Every AKT+ option available for an engine at any of its stages."""
        _, _, year = await self.get_year(brand_slug, model_slug, year_slug, lang)
        engine = find_engine(year, engine_slug, lang)
        overrides = await or_not_found(
            self.addon_overrides(reseller_id), lang, "AKT+ overrides failed",
            reseller_id=reseller_id,
        )
        options = await or_not_found(
            self.addon_catalog(), lang, "AKT+ options failed", engine=engine.id
        )
        return [
            addons.to_view(option, lang, overrides.get(option.id))
            for option in addons.merge_engine_options(options, engine)
        ]

    async def reseller_descriptions(self, reseller_id: str) -> dict[str, Any]:
        """Stage descriptions a reseller wrote; global description documents take precedence."""
        descriptions = {
            d.stage_name: d.description
            for d in await catalog_db.fetch_reseller_stage_descriptions(reseller_id)
        }
        descriptions.update(
            global_description_map(await overrides_db.fetch_global_descriptions(reseller_id))
        )
        return descriptions

    async def stage_descriptions(
        self, reseller_id: str | None = None, lang: str = "sv"
    ) -> dict[str, Any]:
        """Stage name -> description; a reseller's own descriptions win."""
        return await or_not_found(
            self._stage_descriptions(reseller_id), lang, "Stage descriptions failed",
            reseller_id=reseller_id,
        )

    async def _stage_descriptions(self, reseller_id: str | None) -> dict[str, Any]:
        descriptions = {
            d.stage_name: d.description for d in await catalog_db.fetch_stage_descriptions()
        }
        if reseller_id:
            descriptions.update(await self.reseller_descriptions(reseller_id))
        return descriptions

    async def get_engine_page(
        self,
        brand_slug: str,
        model_slug: str,
        year_slug: str,
        engine_slug: str,
        stage: str | None = None,
        lang: str = "sv",
        reseller_id: str | None = None,
    ) -> EnginePage:
        """Everything needed to render one engine page.

        Raises:
            CatalogNotFoundError: the path does not resolve, the brand is
                hidden for the reseller, or the content store failed
        """
        try:
            return await self._engine_page(
                brand_slug, model_slug, year_slug, engine_slug, stage, lang, reseller_id
            )
        except CatalogError:
            raise
        except Exception as e:
            log_error(
                "Engine page failed",
                e,
                path=f"{brand_slug}/{model_slug}/{year_slug}/{engine_slug}",
                reseller_id=reseller_id,
            )
            raise _not_found(lang) from e

    async def _engine_page(
        self,
        brand_slug: str,
        model_slug: str,
        year_slug: str,
        engine_slug: str,
        requested_stage: str | None,
        lang: str,
        reseller_id: str | None,
    ) -> EnginePage:
        config = await self.reseller_config(reseller_id, lang) if reseller_id else None
        brand, model, year = await self.get_year(brand_slug, model_slug, year_slug, lang)
        if is_hidden(brand, config):
            raise _not_found(lang, brand=brand.name, reseller_id=reseller_id)
        engine = find_engine(year, engine_slug, lang)

        overrides = []
        addon_overrides = {}
        descriptions = {
            d.stage_name: d.description for d in await catalog_db.fetch_stage_descriptions()
        }
        global_descriptions: dict[str, Any] = {}
        if reseller_id:
            overrides = await overrides_db.fetch_overrides(reseller_id, brand.name)
            overrides += await overrides_db.fetch_engine_overrides(reseller_id, engine.id)
            global_descriptions = await self.reseller_descriptions(reseller_id)
            addon_overrides = await self.addon_overrides(reseller_id)

        resolved = resolve_engine(
            engine,
            overrides,
            brand=brand.name,
            model=model.name,
            year=year.range,
            global_descriptions=global_descriptions,
        )

        show_aktplus = (config is None or config.display_settings.show_aktplus) and not any(
            r.override is not None and r.override.show_aktplus is False for r in resolved
        )
        show_dyno = config is None or config.display_settings.show_dyno_chart
        options = await self.addon_catalog() if show_aktplus else []
        path = [brand.slug, model.slug, year.slug, engine.slug]

        stages = []
        for item in resolved:
            effective = item.stage
            if effective.description is None and effective.name in descriptions:
                effective = effective.model_copy(
                    update={"description": descriptions[effective.name]}
                )
            anchor = slugify_stage(effective.name)
            stages.append(
                StageView.from_stage(
                    effective,
                    anchor=anchor,
                    display_price=display_price(effective.price, config),
                    description_text=plain_text(addons.localized(effective.description, lang)),
                    expanded=is_expanded(effective.name, requested_stage),
                    contact_link=contact_link(
                        self.settings.public_base_url, path, anchor, reseller_id
                    ),
                    addons=[
                        addons.to_view(o, lang, addon_overrides.get(o.id))
                        for o in addons.options_for_stage(options, engine, effective.name)
                    ],
                    dyno=build_dyno_chart(effective, engine.fuel) if show_dyno else None,
                )
            )

        return EnginePage(
            brand=brand.name,
            brand_slug=brand.slug,
            model=model.name,
            model_slug=model.slug,
            year=year.range,
            year_slug=year.slug,
            engine=engine.label,
            engine_slug=engine.slug,
            engine_id=engine.id,
            fuel=engine.fuel,
            logo_url=(config.logo_url if config and config.logo_url else brand.logo_url),
            reseller_id=reseller_id,
            currency=config.currency if config else DEFAULT_CURRENCY,
            show_aktplus=show_aktplus,
            stages=stages,
            global_addons=[
                addons.to_view(o, lang, addon_overrides.get(o.id))
                for o in addons.global_options_for_engine(options, engine)
            ],
        )
