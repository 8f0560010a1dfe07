"""Bulk catalog import from vendor JSON.

Vendor catalogs are shaped as::

    {brand: {"models": {model: {"years": {year: {"engines": {engine: {
        "type": "Diesel",
        "stages": {"Stage 1": {"origHk": 150, "tunedHk": 190, ...}}
    }}}}}}}}

Any level may be missing and is treated as empty. Records are compared with
the catalog on normalized keys, so "VW"/"vw" and "Golf GTI"/"golf-gti" are
the same entity and "2018 - 2021"/"2018→2021" the same year range.

Import is not atomic across records: each record is fetched, checked and
written on its own, and a failing record never blocks the next.
"""

import logging
import uuid
from typing import Any, Iterable

from ..core.enums import IMPORT_SEED_STAGE, VENDOR_FIRST_STAGE_KEYS, FuelType, ImportStatus
from ..core.logging import log_error
from ..db import catalog as catalog_db
from ..models.catalog import Brand, Engine, Stage, VehicleModel, Year
from ..models.imports import CatalogComparison, ImportRecord, ImportRecordResult, ImportSummary
from ..utils.converters import optional_amount
from ..utils.text import normalize_key, normalize_year_range, slugify
from .preferences import ImportHistory

logger = logging.getLogger(__name__)


def _children(data: Any, key: str) -> dict[str, Any]:
    """Nested level ``key`` of a vendor node, or {} when absent or malformed."""
    if not isinstance(data, dict):
        return {}
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _seed_figures(engine_data: dict[str, Any]) -> dict[str, Any]:
    """Pick the figures for the seeded stage.

    Prefers the stage keyed "Stage 1"/"Steg 1", then the first stage entry,
    then flat figures on the engine itself.
    """
    stages = _children(engine_data, "stages")
    for key in VENDOR_FIRST_STAGE_KEYS:
        if isinstance(stages.get(key), dict):
            return stages[key]
    for value in stages.values():
        if isinstance(value, dict):
            return value
    return engine_data


def parse_vendor_catalog(data: dict[str, Any]) -> list[ImportRecord]:
    """Flatten a vendor catalog into one record per engine."""
    records = []
    for brand, brand_data in (data or {}).items():
        for model, model_data in _children(brand_data, "models").items():
            for year, year_data in _children(model_data, "years").items():
                for engine, engine_data in _children(year_data, "engines").items():
                    engine_data = engine_data if isinstance(engine_data, dict) else {}
                    figures = _seed_figures(engine_data)
                    records.append(
                        ImportRecord(
                            brand=str(brand).strip(),
                            model=str(model).strip(),
                            year=str(year).strip(),
                            engine=str(engine).strip(),
                            fuel=engine_data.get("type") or engine_data.get("fuel"),
                            orig_hk=optional_amount(figures.get("origHk")),
                            tuned_hk=optional_amount(figures.get("tunedHk")),
                            orig_nm=optional_amount(figures.get("origNm")),
                            tuned_nm=optional_amount(figures.get("tunedNm")),
                            price=optional_amount(figures.get("price")),
                        )
                    )
    return records


# -----------------------------------------------------------------------------
# Matching
# -----------------------------------------------------------------------------


def find_brand(brands: Iterable[Brand], name: str) -> Brand | None:
    key = normalize_key(name)
    return next((b for b in brands if normalize_key(b.name) == key), None)


def find_model(brand: Brand, name: str) -> VehicleModel | None:
    key = normalize_key(name)
    return next((m for m in brand.models if normalize_key(m.name) == key), None)


def find_year(model: VehicleModel, year_range: str) -> Year | None:
    key = normalize_year_range(year_range)
    return next((y for y in model.years if normalize_year_range(y.range) == key), None)


def find_engine(year: Year, label: str) -> Engine | None:
    key = normalize_key(label)
    return next((e for e in year.engines if normalize_key(e.label) == key), None)


def record_exists(record: ImportRecord, brand: Brand) -> bool:
    """True when the record's model, year and engine all exist under ``brand``."""
    model = find_model(brand, record.model)
    year = find_year(model, record.year) if model else None
    return bool(year and find_engine(year, record.engine))


def find_missing(records: Iterable[ImportRecord], brands: list[Brand]) -> CatalogComparison:
    """Split vendor records into missing paths and records of unknown brands."""
    comparison = CatalogComparison()
    unknown: dict[str, None] = {}
    for record in records:
        comparison.total_records += 1
        brand = find_brand(brands, record.brand)
        if brand is None:
            unknown.setdefault(record.brand, None)
            continue
        if not record_exists(record, brand):
            comparison.missing.append(record)
    comparison.unknown_brands = list(unknown)
    return comparison


# -----------------------------------------------------------------------------
# Import
# -----------------------------------------------------------------------------


def _seed_engine(record: ImportRecord) -> Engine:
    fuel = FuelType.from_string(record.fuel)
    return Engine(
        id=uuid.uuid4().hex,
        label=record.engine,
        slug=slugify(record.engine),
        fuel=fuel.value if fuel else FuelType.PETROL.value,
        stages=[
            Stage(
                name=IMPORT_SEED_STAGE,
                orig_hk=record.orig_hk,
                tuned_hk=record.tuned_hk,
                orig_nm=record.orig_nm,
                tuned_nm=record.tuned_nm,
                price=record.price,
            )
        ],
    )


def add_record(brand: Brand, record: ImportRecord) -> str | None:
    """Insert the record's path into ``brand`` in place.

    Returns the highest level created ("model", "year" or "engine"), or None
    when the engine already exists.
    """
    engine = _seed_engine(record)

    model = find_model(brand, record.model)
    if model is None:
        year = Year(range=record.year, slug=slugify(record.year), engines=[engine])
        brand.models.append(
            VehicleModel(name=record.model, slug=slugify(record.model), years=[year])
        )
        return "model"

    year = find_year(model, record.year)
    if year is None:
        model.years.append(
            Year(range=record.year, slug=slugify(record.year), engines=[engine])
        )
        return "year"

    if find_engine(year, record.engine) is None:
        year.engines.append(engine)
        return "engine"
    return None


async def import_record(record: ImportRecord) -> ImportRecordResult:
    result = ImportRecordResult(
        brand=record.brand,
        model=record.model,
        year=record.year,
        engine=record.engine,
        status=ImportStatus.ERROR,
    )
    try:
        brand = await catalog_db.fetch_brand(record.brand)
        if brand is None:
            result.message = "brand not found"
            return result

        created = add_record(brand, record)
        if created is None:
            result.status = ImportStatus.EXISTS
            return result

        await catalog_db.save_brand_models(brand.id, brand.models)
        result.status = ImportStatus.CREATED
        result.created = created
        return result
    except Exception as e:
        log_error("Import record failed", e, brand=record.brand, engine=record.engine)
        result.message = str(e) or type(e).__name__
        return result


async def record_history(
    history: ImportHistory, kind: str, details: dict[str, Any]
) -> None:
    """Append to the import history; a failing store is logged, not raised."""
    try:
        await history.record(kind, details)
    except Exception as e:
        log_error("Import history write failed", e, kind=kind)


async def import_records(
    records: Iterable[ImportRecord],
    history: ImportHistory | None = None,
) -> ImportSummary:
    """Create every missing record, one at a time.

    The brand is fetched fresh for each record so paths created by earlier
    records in the batch are seen by later ones.
    """
    summary = ImportSummary()
    for record in records:
        result = await import_record(record)
        summary.results.append(result)
        if result.status is ImportStatus.CREATED:
            summary.created += 1
        elif result.status is ImportStatus.EXISTS:
            summary.exists += 1
        else:
            summary.errors += 1

    logger.info(
        f"Import finished: created={summary.created} exists={summary.exists} "
        f"errors={summary.errors}"
    )
    if history is not None:
        await record_history(
            history,
            "import",
            {
                "created": summary.created,
                "exists": summary.exists,
                "errors": summary.errors,
            },
        )
    return summary
