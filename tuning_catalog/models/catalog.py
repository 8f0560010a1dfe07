"""Nominal catalog types: brand → model → year → engine → stage, plus add-ons
and reseller documents.

Raw content-store rows are translated into these types by
``tuning_catalog.db.mapping``; services only ever operate on them.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class TcuValue(BaseModel):
    original: Optional[str] = None
    optimized: Optional[str] = None


class TcuFields(BaseModel):
    """Transmission-control figures shown on DSG/gearbox stages."""

    launch_control: Optional[TcuValue] = None
    rpm_limit: Optional[TcuValue] = None
    shift_time: Optional[TcuValue] = None


class StageDescription(BaseModel):
    """Shared description document referenced by stages of the same name."""

    id: Optional[str] = None
    stage_name: str
    description: Any = None


class Stage(BaseModel):
    name: str
    orig_hk: Optional[float] = None
    tuned_hk: Optional[float] = None
    orig_nm: Optional[float] = None
    tuned_nm: Optional[float] = None
    price: Optional[float] = None
    tcu_fields: Optional[TcuFields] = None
    description: Any = None  # portable-text blocks or plain string
    description_ref: Optional[StageDescription] = None


class Engine(BaseModel):
    id: str
    label: str
    slug: str = ""
    fuel: str = "Bensin"
    stages: list[Stage] = Field(default_factory=list)
    addon_refs: list[str] = Field(default_factory=list)


class Year(BaseModel):
    range: str
    slug: str = ""
    engines: list[Engine] = Field(default_factory=list)


class VehicleModel(BaseModel):
    name: str
    slug: str = ""
    image_url: Optional[str] = None
    years: list[Year] = Field(default_factory=list)


class Brand(BaseModel):
    id: str
    name: str
    slug: str = ""
    logo_url: Optional[str] = None
    models: list[VehicleModel] = Field(default_factory=list)


class AddOn(BaseModel):
    """AKT+ option: an extra that can be bought together with a stage."""

    id: str
    title: Any = None  # {"sv": ..., "en": ...} or plain string
    description: Any = None
    price: Optional[float] = None
    is_universal: bool = False
    applicable_fuel_types: list[str] = Field(default_factory=list)
    stage_compatibility: Optional[str] = None
    manual_assignments: list[str] = Field(default_factory=list)  # engine ids
    gallery: list[dict[str, Any]] = Field(default_factory=list)
    installation_time: Optional[str] = None
    compatibility_notes: Optional[str] = None


class ResellerOverride(BaseModel):
    """Reseller-specific price/figure override.

    Scope is given by which of brand/model/year/engine are present; see
    ``tuning_catalog.services.overrides`` for the specificity order.
    """

    id: Optional[str] = None
    reseller_id: str
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    engine: Optional[str] = None
    engine_ref: Optional[str] = None
    stage_name: Optional[str] = None
    price: Optional[float] = None
    tuned_hk: Optional[float] = None
    tuned_nm: Optional[float] = None
    custom_description: Any = None
    show_aktplus: Optional[bool] = None
    is_global_description: bool = False
    stage_description: Any = None


class ResellerAddOnOverride(BaseModel):
    id: Optional[str] = None
    reseller_id: str
    addon_id: str
    title: Any = None
    description: Any = None
    price: Optional[float] = None
    gallery: list[dict[str, Any]] = Field(default_factory=list)


class DisplaySettings(BaseModel):
    show_aktplus: bool = True
    show_brand_logo: bool = True
    show_stage_logo: bool = True
    show_dyno_chart: bool = True


class ResellerConfig(BaseModel):
    reseller_id: str
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: str = "SEK"
    language: str = "sv"
    secondary_language: Optional[str] = None
    enable_language_switcher: bool = False
    hidden_makes: list[str] = Field(default_factory=list)
    display_settings: DisplaySettings = Field(default_factory=DisplaySettings)
