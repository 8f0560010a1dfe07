"""Bulk reseller pricing and global stage descriptions.

Both flows replace a set of override documents wholesale: the existing
documents in scope are deleted and the new ones created inside a single
``replace_reseller_overrides`` transaction, so a storefront never sees a
half-applied price list.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..core.enums import BULK_STAGE_NAMES, DEFAULT_CURRENCY, EXCHANGE_RATES
from ..core.exceptions import CatalogNotFoundError
from ..db import catalog as catalog_db
from ..db import overrides as overrides_db
from ..db import resellers as resellers_db
from ..models.catalog import Brand, Engine, ResellerOverride, Stage, VehicleModel, Year
from ..utils.converters import parse_price_input
from ..utils.text import normalize_year_range, slugify
from .overrides import override_document_id

logger = logging.getLogger(__name__)


class PricePreview(BaseModel):
    brand: str
    model: str
    year: str
    engine: str
    stage_name: str
    new_price: float
    current_price: Optional[float] = None


class BulkPricingResult(BaseModel):
    preview: bool = False
    items: list[PricePreview] = Field(default_factory=list)
    updated: int = 0
    brand: str = ""
    model: str = ""
    years: list[str] = Field(default_factory=list)


def exchange_rate(currency: str | None) -> float:
    """Units of ``currency`` per SEK; unknown currencies are treated as SEK."""
    return EXCHANGE_RATES.get((currency or DEFAULT_CURRENCY).upper(), 1.0)


def to_sek(value: Any, currency: str | None) -> float | None:
    """Convert a typed price in the reseller's currency to whole SEK.

    Examples:
        >>> to_sek("450", "EUR")
        4500.0
        >>> to_sek("", "SEK")
    """
    amount = parse_price_input(value)
    if amount is None:
        return None
    return float(round(amount / exchange_rate(currency)))


def from_sek(price_sek: float, currency: str | None) -> float:
    """Display price in the reseller's currency, rounded to the nearest 50."""
    return float(round(price_sek * exchange_rate(currency) / 50) * 50)


def _squash(value: str | None) -> str:
    return "".join((value or "").lower().split())


def _match_model(brands: list[Brand], brand: str, model: str) -> tuple[Brand, VehicleModel]:
    matched_brand = next((b for b in brands if _squash(b.name) == _squash(brand)), None)
    if matched_brand is None:
        raise CatalogNotFoundError(f"No brand matching '{brand}'", brand=brand)
    matched_model = next(
        (m for m in matched_brand.models if _squash(m.name) == _squash(model)), None
    )
    if matched_model is None:
        raise CatalogNotFoundError(
            f"No model matching '{model}' in brand '{matched_brand.name}'",
            brand=matched_brand.name,
            model=model,
        )
    return matched_brand, matched_model


def _years_in_scope(model: VehicleModel, year: str | None) -> list[Year]:
    if not year:
        years = list(model.years)
    else:
        wanted = normalize_year_range(year)
        years = [y for y in model.years if normalize_year_range(y.range) == wanted]
    if not years:
        raise CatalogNotFoundError(
            f"No matching year '{year}' for model '{model.name}'"
            if year
            else f"No years found for model '{model.name}'",
            model=model.name,
            year=year,
        )
    return years


def _stage(engine: Engine, stage_name: str) -> Stage | None:
    return next((s for s in engine.stages if _squash(s.name) == _squash(stage_name)), None)


def _kept(current: ResellerOverride | None, stage: Stage | None, field: str) -> float | None:
    if current is not None and getattr(current, field) is not None:
        return getattr(current, field)
    return getattr(stage, field) if stage else None


def convert_prices(prices: dict[str, Any], currency: str | None) -> dict[str, float]:
    """Per-stage SEK prices; stages left blank are dropped."""
    converted = {}
    for stage_name in BULK_STAGE_NAMES:
        price = to_sek(prices.get(stage_name), currency)
        if price is not None:
            converted[stage_name] = price
    return converted


def build_bulk_overrides(
    reseller_id: str,
    brand: Brand,
    model: VehicleModel,
    years: list[Year],
    prices_sek: dict[str, float],
    existing: list[ResellerOverride],
) -> tuple[list[str], list[ResellerOverride]]:
    """Documents to delete and to create for one bulk price change.

    One fully qualified override per engine and priced stage. Tuned figures
    already overridden for that scope are kept, else the catalog's are used.
    """
    candidates = [
        o for o in existing if o.brand == brand.name and not o.is_global_description
    ]
    delete_ids: list[str] = []
    documents: list[ResellerOverride] = []

    for year in years:
        for engine in year.engines:
            for stage_name, price in prices_sek.items():
                replaced = [
                    o
                    for o in candidates
                    if o.stage_name == stage_name
                    and (
                        (o.engine_ref is not None and o.engine_ref == engine.id)
                        or (
                            o.model == model.name
                            and o.year == year.range
                            and o.engine == engine.label
                        )
                    )
                ]
                current = replaced[0] if replaced else None
                stage = _stage(engine, stage_name)
                delete_ids.extend(o.id for o in replaced if o.id)

                documents.append(
                    ResellerOverride(
                        id=override_document_id(
                            reseller_id, brand.name, model.name, year.range,
                            engine.label, stage_name,
                        ),
                        reseller_id=reseller_id,
                        brand=brand.name,
                        model=model.name,
                        year=year.range,
                        engine=engine.label,
                        engine_ref=engine.id,
                        stage_name=stage_name,
                        price=price,
                        tuned_hk=_kept(current, stage, "tuned_hk"),
                        tuned_nm=_kept(current, stage, "tuned_nm"),
                        custom_description=current.custom_description if current else None,
                        show_aktplus=current.show_aktplus if current else None,
                    )
                )
    return delete_ids, documents


async def apply_bulk_prices(
    reseller_id: str,
    brand: str,
    model: str,
    prices: dict[str, Any],
    year: str | None = None,
    preview: bool = False,
) -> BulkPricingResult:
    """Set one price per stage name across every engine of a model.

    Args:
        prices: Stage name -> price typed in the reseller's currency
        year: Restrict to one year range of the model
        preview: Return the would-be prices without writing anything

    Raises:
        CatalogNotFoundError: brand, model or year does not resolve
    """
    config = await resellers_db.fetch_reseller_config(reseller_id)
    currency = config.currency if config else DEFAULT_CURRENCY
    prices_sek = convert_prices(prices, currency)

    matched_brand, matched_model = _match_model(
        await catalog_db.fetch_brands(), brand.strip(), model.strip()
    )
    years = _years_in_scope(matched_model, (year or "").strip() or None)
    result = BulkPricingResult(
        preview=preview,
        brand=matched_brand.name,
        model=matched_model.name,
        years=[y.range for y in years],
    )

    if preview:
        for y in years:
            for engine in y.engines:
                for stage_name, price in prices_sek.items():
                    stage = _stage(engine, stage_name)
                    result.items.append(
                        PricePreview(
                            brand=matched_brand.name,
                            model=matched_model.name,
                            year=y.range,
                            engine=engine.label,
                            stage_name=stage_name,
                            new_price=price,
                            current_price=stage.price if stage else None,
                        )
                    )
        return result

    if not prices_sek:
        return result

    existing = await overrides_db.fetch_overrides(reseller_id, matched_brand.name)
    delete_ids, documents = build_bulk_overrides(
        reseller_id, matched_brand, matched_model, years, prices_sek, existing
    )
    result.updated = await overrides_db.replace_overrides(reseller_id, delete_ids, documents)
    logger.info(
        f"Bulk override for reseller={reseller_id} {matched_brand.name} "
        f"{matched_model.name}: {result.updated} documents"
    )
    return result


# -----------------------------------------------------------------------------
# Global stage descriptions
# -----------------------------------------------------------------------------


def build_global_descriptions(
    reseller_id: str, descriptions: dict[str, Any]
) -> list[ResellerOverride]:
    """One global description document per stage name with a non-empty description."""
    return [
        ResellerOverride(
            id=f"global-{slugify(reseller_id)}-{slugify(stage_name)}",
            reseller_id=reseller_id,
            stage_name=stage_name,
            is_global_description=True,
            stage_description=description,
        )
        for stage_name, description in descriptions.items()
        if description
    ]


async def replace_global_descriptions(
    reseller_id: str, descriptions: dict[str, Any]
) -> dict[str, Any]:
    """Replace all of a reseller's global descriptions; returns the new map."""
    existing = await overrides_db.fetch_global_descriptions(reseller_id)
    documents = build_global_descriptions(reseller_id, descriptions)
    await overrides_db.replace_overrides(
        reseller_id, [doc.id for doc in existing if doc.id], documents
    )
    return {doc.stage_name: doc.stage_description for doc in documents}
