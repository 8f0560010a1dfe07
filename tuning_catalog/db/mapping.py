"""Translate raw content-store rows into catalog types and back.

Catalog documents were migrated from a camelCase CMS, so nested brand trees
may carry either ``tunedHk`` or ``tuned_hk`` style keys. Readers accept both;
writers always emit snake_case. Numeric figures pass through
``optional_amount`` so negative or missing values become ``None``.
"""

from typing import Any

from ..models.catalog import (
    AddOn,
    Brand,
    DisplaySettings,
    Engine,
    ResellerAddOnOverride,
    ResellerConfig,
    ResellerOverride,
    Stage,
    StageDescription,
    TcuFields,
    TcuValue,
    VehicleModel,
    Year,
)
from ..utils.converters import optional_amount
from ..utils.text import slugify


def _pick(raw: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    result = []
    for item in value:
        if isinstance(item, dict):
            item = _pick(item, "_ref", "id", "_id")
        if item:
            result.append(str(item))
    return result


def _asset_url(value: Any) -> str | None:
    """Image fields are either a URL string or ``{"asset": {"url": ...}}``."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        asset = value.get("asset")
        if isinstance(asset, dict):
            return _str_or_none(asset.get("url"))
        return _str_or_none(value.get("url"))
    return None


# =============================================================================
# CATALOG TREE
# =============================================================================


def _tcu_value(raw: Any) -> TcuValue | None:
    if not isinstance(raw, dict):
        return None
    value = TcuValue(
        original=_str_or_none(raw.get("original")),
        optimized=_str_or_none(raw.get("optimized")),
    )
    if value.original is None and value.optimized is None:
        return None
    return value


def tcu_fields_from_raw(raw: Any) -> TcuFields | None:
    if not isinstance(raw, dict):
        return None
    fields = TcuFields(
        launch_control=_tcu_value(_pick(raw, "launch_control", "launchControl")),
        rpm_limit=_tcu_value(_pick(raw, "rpm_limit", "rpmLimit")),
        shift_time=_tcu_value(_pick(raw, "shift_time", "shiftTime")),
    )
    if not (fields.launch_control or fields.rpm_limit or fields.shift_time):
        return None
    return fields


def stage_description_from_row(row: dict[str, Any]) -> StageDescription | None:
    stage_name = _str_or_none(_pick(row, "stage_name", "stageName"))
    if not stage_name:
        return None
    return StageDescription(
        id=_str_or_none(_pick(row, "id", "_id")),
        stage_name=stage_name,
        description=row.get("description"),
    )


def stage_from_raw(raw: dict[str, Any]) -> Stage:
    ref = _pick(raw, "description_ref", "descriptionRef")
    return Stage(
        name=str(raw.get("name") or "").strip(),
        orig_hk=optional_amount(_pick(raw, "orig_hk", "origHk")),
        tuned_hk=optional_amount(_pick(raw, "tuned_hk", "tunedHk")),
        orig_nm=optional_amount(_pick(raw, "orig_nm", "origNm")),
        tuned_nm=optional_amount(_pick(raw, "tuned_nm", "tunedNm")),
        price=optional_amount(raw.get("price")),
        tcu_fields=tcu_fields_from_raw(_pick(raw, "tcu_fields", "tcuFields")),
        description=raw.get("description"),
        description_ref=(
            stage_description_from_row({"stage_name": raw.get("name"), **ref})
            if isinstance(ref, dict)
            else None
        ),
    )


def engine_from_raw(raw: dict[str, Any], fallback_id: str) -> Engine:
    label = str(raw.get("label") or "").strip()
    return Engine(
        id=str(_pick(raw, "id", "_id", "_key", default=fallback_id)),
        label=label,
        slug=_str_or_none(raw.get("slug")) or slugify(label),
        fuel=_str_or_none(raw.get("fuel")) or "Bensin",
        stages=[
            stage_from_raw(s)
            for s in raw.get("stages") or []
            if isinstance(s, dict) and s.get("name")
        ],
        addon_refs=_str_list(
            _pick(raw, "addon_refs", "aktplus_refs", "globalAktPlusOptions")
        ),
    )


def year_from_raw(raw: dict[str, Any], parent_id: str) -> Year:
    year_range = str(raw.get("range") or "").strip()
    year_id = f"{parent_id}:{slugify(year_range)}"
    return Year(
        range=year_range,
        slug=_str_or_none(raw.get("slug")) or slugify(year_range),
        engines=[
            engine_from_raw(e, f"{year_id}:{slugify(str(e.get('label') or ''))}")
            for e in raw.get("engines") or []
            if isinstance(e, dict) and e.get("label")
        ],
    )


def model_from_raw(raw: dict[str, Any], parent_id: str) -> VehicleModel:
    name = str(raw.get("name") or "").strip()
    slug = raw.get("slug")
    if isinstance(slug, dict):
        slug = slug.get("current")
    return VehicleModel(
        name=name,
        slug=_str_or_none(slug) or slugify(name),
        image_url=_asset_url(_pick(raw, "image_url", "image")),
        years=[
            year_from_raw(y, f"{parent_id}:{slugify(name)}")
            for y in raw.get("years") or []
            if isinstance(y, dict) and y.get("range")
        ],
    )


def brand_from_row(row: dict[str, Any]) -> Brand:
    name = str(row.get("name") or "").strip()
    brand_id = str(_pick(row, "id", "_id", default=slugify(name)))
    slug = row.get("slug")
    if isinstance(slug, dict):
        slug = slug.get("current")
    return Brand(
        id=brand_id,
        name=name,
        slug=_str_or_none(slug) or slugify(name),
        logo_url=_asset_url(_pick(row, "logo_url", "logo")),
        models=[
            model_from_raw(m, brand_id)
            for m in row.get("models") or []
            if isinstance(m, dict) and m.get("name")
        ],
    )


def stage_to_raw(stage: Stage) -> dict[str, Any]:
    raw = stage.model_dump(exclude_none=True, exclude={"description_ref"})
    if stage.description_ref and stage.description_ref.id:
        raw["description_ref"] = stage.description_ref.model_dump(
            exclude_none=True, exclude={"stage_name"}
        )
    return raw


def models_to_raw(models: list[VehicleModel]) -> list[dict[str, Any]]:
    """Serialize a brand's model tree for writing back to the ``brands`` row."""
    return [
        {
            "name": model.name,
            "slug": model.slug,
            **({"image_url": model.image_url} if model.image_url else {}),
            "years": [
                {
                    "range": year.range,
                    "slug": year.slug,
                    "engines": [
                        {
                            "id": engine.id,
                            "label": engine.label,
                            "slug": engine.slug,
                            "fuel": engine.fuel,
                            "stages": [stage_to_raw(s) for s in engine.stages],
                            "addon_refs": engine.addon_refs,
                        }
                        for engine in year.engines
                    ],
                }
                for year in model.years
            ],
        }
        for model in models
    ]


# =============================================================================
# ADD-ONS
# =============================================================================


def addon_from_row(row: dict[str, Any]) -> AddOn:
    return AddOn(
        id=str(_pick(row, "id", "_id")),
        title=row.get("title"),
        description=row.get("description"),
        price=optional_amount(row.get("price")),
        is_universal=bool(_pick(row, "is_universal", "isUniversal", default=False)),
        applicable_fuel_types=_str_list(
            _pick(row, "applicable_fuel_types", "applicableFuelTypes")
        ),
        stage_compatibility=_str_or_none(
            _pick(row, "stage_compatibility", "stageCompatibility")
        ),
        manual_assignments=_str_list(
            _pick(row, "manual_assignments", "manualAssignments")
        ),
        gallery=[g for g in row.get("gallery") or [] if isinstance(g, dict)],
        installation_time=_str_or_none(
            _pick(row, "installation_time", "installationTime")
        ),
        compatibility_notes=_str_or_none(
            _pick(row, "compatibility_notes", "compatibilityNotes")
        ),
    )


def addon_override_from_row(row: dict[str, Any]) -> ResellerAddOnOverride:
    return ResellerAddOnOverride(
        id=_str_or_none(row.get("id")),
        reseller_id=str(row.get("reseller_id") or ""),
        addon_id=str(row.get("addon_id") or ""),
        title=row.get("title"),
        description=row.get("description"),
        price=optional_amount(row.get("price")),
        gallery=[g for g in row.get("gallery") or [] if isinstance(g, dict)],
    )


# =============================================================================
# RESELLER DOCUMENTS
# =============================================================================


def override_from_row(row: dict[str, Any]) -> ResellerOverride:
    return ResellerOverride(
        id=_str_or_none(_pick(row, "id", "_id")),
        reseller_id=str(_pick(row, "reseller_id", "resellerId", default="")),
        brand=_str_or_none(row.get("brand")),
        model=_str_or_none(row.get("model")),
        year=_str_or_none(row.get("year")),
        engine=_str_or_none(row.get("engine")),
        engine_ref=_str_or_none(_pick(row, "engine_ref", "engineRef")),
        stage_name=_str_or_none(_pick(row, "stage_name", "stageName")),
        price=optional_amount(row.get("price")),
        tuned_hk=optional_amount(_pick(row, "tuned_hk", "tunedHk")),
        tuned_nm=optional_amount(_pick(row, "tuned_nm", "tunedNm")),
        custom_description=_pick(row, "custom_description", "customDescription"),
        show_aktplus=_pick(row, "show_aktplus", "showAktPlus"),
        is_global_description=bool(
            _pick(row, "is_global_description", "isGlobalDescription", default=False)
        ),
        stage_description=_pick(row, "stage_description", "stageDescription"),
    )


def override_to_row(override: ResellerOverride) -> dict[str, Any]:
    """Columns of the ``reseller_overrides`` table; absent scope stays null."""
    return override.model_dump()


def reseller_config_from_row(row: dict[str, Any]) -> ResellerConfig:
    display = row.get("display_settings")
    return ResellerConfig(
        reseller_id=str(row.get("reseller_id") or ""),
        email=_str_or_none(row.get("email")),
        logo_url=_asset_url(_pick(row, "logo_url", "logo")),
        currency=_str_or_none(row.get("currency")) or "SEK",
        language=_str_or_none(row.get("language")) or "sv",
        secondary_language=_str_or_none(row.get("secondary_language")),
        enable_language_switcher=bool(row.get("enable_language_switcher") or False),
        hidden_makes=_str_list(row.get("hidden_makes")),
        display_settings=(
            DisplaySettings.model_validate(display)
            if isinstance(display, dict)
            else DisplaySettings()
        ),
    )
