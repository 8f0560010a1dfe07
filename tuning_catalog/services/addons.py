"""AKT+ option applicability and localization.

An option applies to a stage when it is available for the engine (universal,
listed for the engine's fuel, or explicitly assigned to the engine) and it
is not restricted to a different stage. There is no stored "assigned" state;
applicability is recomputed on every read.
"""

import logging
import threading
from typing import Any, Awaitable, Callable, Iterable

from cachetools import TTLCache

from ..models.catalog import AddOn, Engine, ResellerAddOnOverride
from ..models.pages import AddOnView

logger = logging.getLogger(__name__)


def is_applicable(
    option: AddOn,
    fuel: str,
    stage_name: str | None,
    engine_id: str,
    engine_refs: Iterable[str] = (),
) -> bool:
    """Pure applicability predicate over (fuel, stage name, engine id).

    ``stage_name=None`` asks for stage-independent options only.
    """
    available = (
        option.is_universal
        or fuel in option.applicable_fuel_types
        or engine_id in option.manual_assignments
        or option.id in engine_refs
    )
    if stage_name is None:
        return available and option.stage_compatibility is None
    stage_ok = option.stage_compatibility is None or option.stage_compatibility == stage_name
    return available and stage_ok


def options_for_stage(
    options: Iterable[AddOn], engine: Engine, stage_name: str
) -> list[AddOn]:
    """Options offered with one stage, deduplicated by id in catalog order."""
    unique: dict[str, AddOn] = {}
    for option in options:
        if is_applicable(option, engine.fuel, stage_name, engine.id, engine.addon_refs):
            unique.setdefault(option.id, option)
    return list(unique.values())


def global_options_for_engine(options: Iterable[AddOn], engine: Engine) -> list[AddOn]:
    """Options that apply to the engine regardless of stage."""
    unique: dict[str, AddOn] = {}
    for option in options:
        if is_applicable(option, engine.fuel, None, engine.id, engine.addon_refs):
            unique.setdefault(option.id, option)
    return list(unique.values())


def merge_engine_options(options: Iterable[AddOn], engine: Engine) -> list[AddOn]:
    """Union of options over all of the engine's stages."""
    options = list(options)
    merged: dict[str, AddOn] = {}
    for stage in engine.stages:
        for option in options_for_stage(options, engine, stage.name):
            merged.setdefault(option.id, option)
    return list(merged.values())


def localized(value: Any, lang: str = "sv") -> Any:
    """Resolve a localized field (``{"sv": ..., "en": ...}``) with Swedish fallback."""
    if isinstance(value, dict):
        return value.get(lang) or value.get("sv") or next(
            (v for v in value.values() if v), ""
        )
    return value if value is not None else ""


def to_view(
    option: AddOn,
    lang: str = "sv",
    override: ResellerAddOnOverride | None = None,
) -> AddOnView:
    """Localized option, with a reseller's override of title/description/price."""
    title = (override.title if override and override.title else None) or option.title
    description = (
        override.description if override and override.description else None
    ) or option.description
    price = override.price if override and override.price is not None else option.price
    gallery = override.gallery if override and override.gallery else option.gallery
    return AddOnView(
        id=option.id,
        title=str(localized(title, lang) or ""),
        description=localized(description, lang),
        price=price,
        gallery=gallery,
        installation_time=option.installation_time,
        compatibility_notes=option.compatibility_notes,
        is_override=override is not None,
    )


def override_map(
    overrides: Iterable[ResellerAddOnOverride],
) -> dict[str, ResellerAddOnOverride]:
    return {o.addon_id: o for o in overrides}


class AddOnCatalogCache:
    """TTL cache for the AKT+ option catalog.

    The option list changes rarely and is needed on every engine page, so it
    is fetched at most once per TTL. Thread-safe via a threading.Lock.
    """

    _KEY = "aktplus_options"

    def __init__(self, ttl: int = 300) -> None:
        self._cache: TTLCache[str, list[AddOn]] = TTLCache(maxsize=1, ttl=ttl)
        self._lock = threading.Lock()

    async def get_or_load(self, loader: Callable[[], Awaitable[list[AddOn]]]) -> list[AddOn]:
        with self._lock:
            cached = self._cache.get(self._KEY)
        if cached is not None:
            return cached

        options = await loader()
        with self._lock:
            self._cache[self._KEY] = options
        logger.debug("AKT+ option cache refreshed: %d options", len(options))
        return options

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
