"""Tests for AKT+ option applicability, localization and caching."""

from unittest.mock import AsyncMock

from tuning_catalog.models.catalog import AddOn, ResellerAddOnOverride
from tuning_catalog.services.addons import (
    AddOnCatalogCache,
    global_options_for_engine,
    is_applicable,
    localized,
    merge_engine_options,
    options_for_stage,
    to_view,
)


class TestApplicability:
    def test_universal_applies_everywhere(self):
        option = AddOn(id="u", is_universal=True)
        assert is_applicable(option, "Diesel", "Steg 1", "e1")
        assert is_applicable(option, "Bensin", "DSG", "e2")

    def test_fuel_must_be_listed(self):
        option = AddOn(id="f", applicable_fuel_types=["Bensin"])
        assert is_applicable(option, "Bensin", "Steg 1", "e1")
        assert not is_applicable(option, "Diesel", "Steg 1", "e1")

    def test_manual_assignment(self):
        option = AddOn(id="m", manual_assignments=["e1"])
        assert is_applicable(option, "Diesel", "Steg 1", "e1")
        assert not is_applicable(option, "Diesel", "Steg 1", "e2")

    def test_engine_reference(self):
        option = AddOn(id="r")
        assert is_applicable(option, "Diesel", "Steg 1", "e1", engine_refs=["r"])

    def test_stage_compatibility(self):
        option = AddOn(id="s", is_universal=True, stage_compatibility="Steg 2")
        assert is_applicable(option, "Diesel", "Steg 2", "e1")
        assert not is_applicable(option, "Diesel", "Steg 1", "e1")

    def test_stage_independent_query(self):
        assert is_applicable(AddOn(id="u", is_universal=True), "Diesel", None, "e1")
        restricted = AddOn(id="s", is_universal=True, stage_compatibility="Steg 2")
        assert not is_applicable(restricted, "Diesel", None, "e1")


class TestEngineOptions:
    def test_options_for_stage(self, d4_engine, addon_catalog):
        steg1 = [o.id for o in options_for_stage(addon_catalog, d4_engine, "Steg 1")]
        steg2 = [o.id for o in options_for_stage(addon_catalog, d4_engine, "Steg 2")]
        assert steg1 == ["launch", "dpf"]
        assert steg2 == ["egr", "launch", "dpf"]

    def test_duplicates_removed(self, d4_engine, addon_catalog):
        doubled = addon_catalog + addon_catalog
        ids = [o.id for o in options_for_stage(doubled, d4_engine, "Steg 1")]
        assert ids == ["launch", "dpf"]

    def test_global_options(self, d4_engine, addon_catalog):
        ids = [o.id for o in global_options_for_engine(addon_catalog, d4_engine)]
        assert ids == ["launch", "dpf"]

    def test_merge_over_stages(self, d4_engine, addon_catalog):
        ids = {o.id for o in merge_engine_options(addon_catalog, d4_engine)}
        assert ids == {"egr", "launch", "dpf"}


class TestLocalization:
    def test_requested_language(self):
        assert localized({"sv": "Hej", "en": "Hello"}, "en") == "Hello"

    def test_swedish_fallback(self):
        assert localized({"sv": "Hej"}, "de") == "Hej"

    def test_any_language_fallback(self):
        assert localized({"en": "Hello"}, "de") == "Hello"

    def test_plain_values(self):
        assert localized("Launch control", "en") == "Launch control"
        assert localized(None, "en") == ""

    def test_view_with_reseller_override(self, addon_catalog):
        egr = addon_catalog[1]
        override = ResellerAddOnOverride(
            reseller_id="test2", addon_id="egr", title={"en": "EGR off"}, price=1995
        )
        view = to_view(egr, "en", override)
        assert view.title == "EGR off"
        assert view.price == 1995
        assert view.is_override

    def test_view_without_override(self, addon_catalog):
        view = to_view(addon_catalog[1], "sv")
        assert view.title == "EGR-avstängning"
        assert view.price == 2495
        assert not view.is_override


class TestCatalogCache:
    async def test_loads_once_within_ttl(self, addon_catalog):
        cache = AddOnCatalogCache(ttl=300)
        loader = AsyncMock(return_value=addon_catalog)
        assert await cache.get_or_load(loader) == addon_catalog
        assert await cache.get_or_load(loader) == addon_catalog
        loader.assert_awaited_once()

    async def test_clear_forces_reload(self, addon_catalog):
        cache = AddOnCatalogCache(ttl=300)
        loader = AsyncMock(return_value=addon_catalog)
        await cache.get_or_load(loader)
        cache.clear()
        await cache.get_or_load(loader)
        assert loader.await_count == 2
