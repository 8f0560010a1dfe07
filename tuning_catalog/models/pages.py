"""Response shapes for catalog pages."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from .catalog import Stage, TcuFields


class DynoChart(BaseModel):
    """Synthetic power/torque curves. Illustrative only, not measured data."""

    rpm: list[int]
    orig_hk: Optional[list[float]] = None
    tuned_hk: Optional[list[float]] = None
    orig_nm: Optional[list[float]] = None
    tuned_nm: Optional[list[float]] = None


class AddOnView(BaseModel):
    id: str
    title: str
    description: Any = None
    price: Optional[float] = None
    gallery: list[dict[str, Any]] = Field(default_factory=list)
    installation_time: Optional[str] = None
    compatibility_notes: Optional[str] = None
    is_override: bool = False


class StageView(BaseModel):
    name: str
    anchor: str
    orig_hk: Optional[float] = None
    tuned_hk: Optional[float] = None
    orig_nm: Optional[float] = None
    tuned_nm: Optional[float] = None
    price: Optional[float] = None
    display_price: Optional[float] = None  # in the page's currency
    tcu_fields: Optional[TcuFields] = None
    description: Any = None
    description_text: str = ""
    expanded: bool = False
    contact_link: str
    addons: list[AddOnView] = Field(default_factory=list)
    dyno: Optional[DynoChart] = None

    @classmethod
    def from_stage(cls, stage: Stage, **kwargs: Any) -> "StageView":
        return cls(
            name=stage.name,
            orig_hk=stage.orig_hk,
            tuned_hk=stage.tuned_hk,
            orig_nm=stage.orig_nm,
            tuned_nm=stage.tuned_nm,
            price=stage.price,
            tcu_fields=stage.tcu_fields,
            description=stage.description,
            **kwargs,
        )


class BrandSummary(BaseModel):
    name: str
    slug: str
    logo_url: Optional[str] = None
    models: list[str] = Field(default_factory=list)


class EnginePage(BaseModel):
    brand: str
    brand_slug: str
    model: str
    model_slug: str
    year: str
    year_slug: str
    engine: str
    engine_slug: str
    engine_id: str
    fuel: str
    logo_url: Optional[str] = None
    reseller_id: Optional[str] = None
    currency: str = "SEK"
    show_aktplus: bool = True
    stages: list[StageView]
    global_addons: list[AddOnView] = Field(default_factory=list)
