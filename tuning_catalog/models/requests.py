"""Request bodies accepted by the HTTP API."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from .imports import ImportRecord


class VehicleInfo(BaseModel):
    brand: str = ""
    model: str = ""
    year: str = ""
    engine: str = ""


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)
    phone: str = Field(default="", max_length=50)
    message: str = Field(default="", max_length=5000)
    stage_or_option: str = Field(default="", max_length=200)
    branch: Optional[str] = Field(default=None, max_length=100)
    link: Optional[str] = Field(default=None, max_length=1000)
    vehicle: Optional[VehicleInfo] = None
    reseller_id: Optional[str] = None
    lang: str = "sv"


class OverrideCreate(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    engine: Optional[str] = None
    engine_ref: Optional[str] = None
    stage_name: str = Field(..., min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    tuned_hk: Optional[float] = Field(default=None, ge=0)
    tuned_nm: Optional[float] = Field(default=None, ge=0)
    custom_description: Any = None
    show_aktplus: Optional[bool] = None


class OverridePatch(BaseModel):
    price: Optional[float] = Field(default=None, ge=0)
    tuned_hk: Optional[float] = Field(default=None, ge=0)
    tuned_nm: Optional[float] = Field(default=None, ge=0)
    custom_description: Any = None
    show_aktplus: Optional[bool] = None


class BulkOverrideRequest(BaseModel):
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: Optional[str] = None
    stage1_price: Any = None
    stage2_price: Any = None
    stage3_price: Any = None
    stage4_price: Any = None
    dsg_price: Any = None
    preview: bool = False

    def prices_by_stage(self) -> dict[str, Any]:
        return {
            "Steg 1": self.stage1_price,
            "Steg 2": self.stage2_price,
            "Steg 3": self.stage3_price,
            "Steg 4": self.stage4_price,
            "DSG": self.dsg_price,
        }


class GlobalDescriptionsRequest(BaseModel):
    descriptions: dict[str, Any]


class StageDescriptionUpdate(BaseModel):
    stage_name: str = Field(..., min_length=1)
    description: Any


class AddOnOverrideUpdate(BaseModel):
    addon_id: str = Field(..., min_length=1)
    title: Optional[str] = None
    description: Any
    price: Optional[float] = Field(default=None, ge=0)
    asset_url: Optional[str] = None
    lang: str = "sv"


class ResellerSettingsUpdate(BaseModel):
    currency: Optional[str] = None
    language: Optional[str] = None
    secondary_language: Optional[str] = None
    enable_language_switcher: Optional[bool] = None
    hidden_makes: Optional[list[str]] = None
    display_settings: Optional[dict[str, bool]] = None


class ImageUploadRequest(BaseModel):
    image_data: str = Field(..., min_length=1, description="Base64-encoded image")
    filename: str = Field(..., min_length=1, max_length=255)
    folder: str = Field(default="uploads", pattern=r"^[a-z0-9_-]+$")


class CatalogCompareRequest(BaseModel):
    catalog: dict[str, Any] = Field(..., description="Vendor catalog JSON")


class ImportMissingRequest(BaseModel):
    items: list[ImportRecord] = Field(..., min_length=1)


class LanguagePreferenceUpdate(BaseModel):
    language: str
