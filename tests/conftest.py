"""Shared fixtures. Settings come from the environment, so it is primed here
before any application module is imported."""

import os

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-service-key")
os.environ.setdefault("API_ADMIN_KEY", "test-admin-key")
os.environ.setdefault("RESEND_API_KEY", "test-resend-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://www.example.se")
os.environ["PREFERENCES_BACKEND"] = "memory"
os.environ["CONTACT_RATE_LIMIT"] = "1000/minute"

import pytest  # noqa: E402

from tuning_catalog.models.catalog import (  # noqa: E402
    AddOn,
    Brand,
    Engine,
    ResellerConfig,
    Stage,
    VehicleModel,
    Year,
)


@pytest.fixture
def d4_engine() -> Engine:
    return Engine(
        id="engine-d4",
        label="D4 190hk",
        slug="d4-190hk",
        fuel="Diesel",
        stages=[
            Stage(
                name="Steg 1",
                orig_hk=190,
                tuned_hk=235,
                orig_nm=400,
                tuned_nm=480,
                price=4995,
            ),
            Stage(
                name="Steg 2",
                orig_hk=190,
                tuned_hk=260,
                orig_nm=400,
                tuned_nm=520,
                price=8995,
            ),
        ],
    )


@pytest.fixture
def volvo(d4_engine) -> Brand:
    return Brand(
        id="brand-volvo",
        name="Volvo",
        slug="volvo",
        logo_url="https://cdn.example.se/volvo.png",
        models=[
            VehicleModel(
                name="XC60",
                slug="xc60",
                years=[Year(range="2018-2021", slug="2018-2021", engines=[d4_engine])],
            ),
            VehicleModel(
                name="XC90",
                slug="xc90",
                years=[
                    Year(
                        range="2015-2019",
                        slug="2015-2019",
                        engines=[
                            Engine(
                                id="engine-t6",
                                label="T6 320hk",
                                slug="t6-320hk",
                                fuel="Bensin",
                                stages=[Stage(name="Steg 1", tuned_hk=360, price=5995)],
                            )
                        ],
                    )
                ],
            ),
        ],
    )


@pytest.fixture
def addon_catalog() -> list[AddOn]:
    return [
        AddOn(id="pops", title={"sv": "Pops & Bangs", "en": "Pops & Bangs"}, price=1995,
              applicable_fuel_types=["Bensin"]),
        AddOn(id="egr", title={"sv": "EGR-avstängning", "en": "EGR delete"}, price=2495,
              applicable_fuel_types=["Diesel"], stage_compatibility="Steg 2"),
        AddOn(id="launch", title="Launch control", price=995, is_universal=True),
        AddOn(id="dpf", title={"sv": "DPF"}, price=2995, manual_assignments=["engine-d4"]),
    ]


@pytest.fixture
def reseller_config() -> ResellerConfig:
    return ResellerConfig(reseller_id="test2", email="verkstad@example.se", currency="EUR")
