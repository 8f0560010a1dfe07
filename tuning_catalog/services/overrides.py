"""Reseller override resolution.

A reseller can change the price and tuned figures of any stage without
copying the catalog. Override documents are matched to a stage in strict
specificity order and the first tier with a match wins:

    1. full        brand + model + year + engine + stage name
    2. model-wide  brand + model + stage name   (no year, no engine)
    3. year-wide   brand + year + stage name    (no model, no engine)
    4. brand-wide  brand + stage name           (no model, year or engine)

Names are compared with exact string equality on display names. Exactly one
document, or none, applies to a stage; figures from two documents are never
combined. Within the winning document, undefined fields fall back to the
base stage (field-level coalesce).

Everything here is pure: fetching overrides is the caller's job.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from ..core.exceptions import AmbiguousOverrideError
from ..models.catalog import Engine, ResellerOverride, Stage
from ..utils.text import slugify


@dataclass(frozen=True)
class StageScope:
    """Where a stage sits in the catalog, by display names."""

    brand: str
    model: str
    year: str
    engine: str
    engine_id: str | None = None


@dataclass(frozen=True)
class ResolvedStage:
    stage: Stage
    override: ResellerOverride | None = None


def _absent(*values: str | None) -> bool:
    return all(v is None for v in values)


def _full(o: ResellerOverride, s: StageScope) -> bool:
    engine_hit = o.engine == s.engine or (
        o.engine_ref is not None and o.engine_ref == s.engine_id
    )
    return o.model == s.model and o.year == s.year and engine_hit


def _model_wide(o: ResellerOverride, s: StageScope) -> bool:
    return o.model == s.model and _absent(o.year, o.engine, o.engine_ref)


def _year_wide(o: ResellerOverride, s: StageScope) -> bool:
    return o.year == s.year and _absent(o.model, o.engine, o.engine_ref)


def _brand_wide(o: ResellerOverride, s: StageScope) -> bool:
    return _absent(o.model, o.year, o.engine, o.engine_ref)


SPECIFICITY_TIERS: tuple[tuple[str, Callable[[ResellerOverride, StageScope], bool]], ...] = (
    ("full", _full),
    ("model", _model_wide),
    ("year", _year_wide),
    ("brand", _brand_wide),
)


def _dedupe(overrides: Iterable[ResellerOverride]) -> list[ResellerOverride]:
    """Drop repeated copies of the same stored document."""
    seen: set[str] = set()
    unique = []
    for o in overrides:
        if o.id is not None:
            if o.id in seen:
                continue
            seen.add(o.id)
        unique.append(o)
    return unique


def find_override(
    stage_name: str,
    scope: StageScope,
    overrides: Iterable[ResellerOverride],
) -> ResellerOverride | None:
    """Return the single most specific override for a stage, or None.

    Raises:
        AmbiguousOverrideError: the winning tier holds more than one document.
    """
    candidates = [
        o
        for o in _dedupe(overrides)
        if not o.is_global_description
        and o.stage_name == stage_name
        and o.brand == scope.brand
    ]
    for _tier, matches in SPECIFICITY_TIERS:
        winners = [o for o in candidates if matches(o, scope)]
        if len(winners) > 1:
            raise AmbiguousOverrideError(stage_name, [str(o.id) for o in winners])
        if winners:
            return winners[0]
    return None


def apply_override(stage: Stage, override: ResellerOverride) -> Stage:
    """Coalesce override fields over the base stage."""

    def pick(value: Any, fallback: Any) -> Any:
        return fallback if value is None else value

    return stage.model_copy(
        update={
            "price": pick(override.price, stage.price),
            "tuned_hk": pick(override.tuned_hk, stage.tuned_hk),
            "tuned_nm": pick(override.tuned_nm, stage.tuned_nm),
            "description": pick(override.custom_description, stage.description),
        }
    )


def resolve_stage(
    stage: Stage,
    overrides: Iterable[ResellerOverride],
    *,
    brand: str,
    model: str,
    year: str,
    engine: str,
    engine_id: str | None = None,
) -> Stage:
    """Effective stage as seen by a reseller's storefront.

    Returns the base stage object itself when no override applies.
    """
    scope = StageScope(brand, model, year, engine, engine_id)
    override = find_override(stage.name, scope, overrides)
    if override is None:
        return stage
    return apply_override(stage, override)


def resolve_engine(
    engine: Engine,
    overrides: Iterable[ResellerOverride],
    *,
    brand: str,
    model: str,
    year: str,
    global_descriptions: dict[str, Any] | None = None,
) -> list[ResolvedStage]:
    """Resolve every stage of an engine and fill in descriptions.

    Description precedence: the override's custom description, then the
    reseller's global description for that stage name, then the stage's own
    description, then the shared description document it references.
    """
    overrides = _dedupe(overrides)
    scope = StageScope(brand, model, year, engine.label, engine.id)
    global_descriptions = global_descriptions or {}

    resolved = []
    for stage in engine.stages:
        override = find_override(stage.name, scope, overrides)
        effective = apply_override(stage, override) if override else stage

        if override is None or override.custom_description is None:
            fallback = global_descriptions.get(stage.name)
            if fallback is None:
                fallback = stage.description
            if fallback is None and stage.description_ref is not None:
                fallback = stage.description_ref.description
            if fallback is not stage.description:
                effective = effective.model_copy(update={"description": fallback})

        resolved.append(ResolvedStage(effective, override))
    return resolved


def global_description_map(documents: Iterable[ResellerOverride]) -> dict[str, Any]:
    """Stage name -> description from a reseller's global description documents."""
    return {
        doc.stage_name: doc.stage_description
        for doc in documents
        if doc.is_global_description and doc.stage_name and doc.stage_description
    }


# =============================================================================
# WRITE-SIDE HELPERS
# =============================================================================


def scope_tier(override: ResellerOverride) -> str | None:
    """Name of the specificity tier an override's scope can match, if any."""
    if not override.brand or not override.stage_name:
        return None
    has_engine = override.engine is not None or override.engine_ref is not None
    if override.model and override.year and has_engine:
        return "full"
    if override.model and not override.year and not has_engine:
        return "model"
    if override.year and not override.model and not has_engine:
        return "year"
    if not override.model and not override.year and not has_engine:
        return "brand"
    return None


def override_document_id(
    reseller_id: str,
    brand: str | None,
    model: str | None,
    year: str | None,
    engine: str | None,
    stage_name: str | None,
) -> str:
    """Deterministic document id for a scope, so one scope maps to one document.

    Examples:
        >>> override_document_id("test2", "Volvo", None, None, None, "Steg 1")
        'override-test2-volvo----steg-1'
    """
    parts = [reseller_id, brand, model, year, engine, stage_name]
    return "override-" + "-".join(slugify(p or "") for p in parts)
