"""Bulk catalog import records and results."""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.enums import ImportStatus


class ImportRecord(BaseModel):
    """One (brand, model, year, engine) path from a vendor catalog, with the
    figures of the stage that gets seeded when the path is created."""

    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: str = Field(..., min_length=1)
    engine: str = Field(..., min_length=1)
    fuel: Optional[str] = None
    orig_hk: Optional[float] = None
    tuned_hk: Optional[float] = None
    orig_nm: Optional[float] = None
    tuned_nm: Optional[float] = None
    price: Optional[float] = None


class ImportRecordResult(BaseModel):
    brand: str
    model: str
    year: str
    engine: str
    status: ImportStatus
    created: Optional[str] = None  # "model", "year" or "engine"
    message: Optional[str] = None


class ImportSummary(BaseModel):
    results: list[ImportRecordResult] = Field(default_factory=list)
    created: int = 0
    exists: int = 0
    errors: int = 0


class CatalogComparison(BaseModel):
    """Vendor records absent from the catalog, split by whether the brand exists."""

    missing: list[ImportRecord] = Field(default_factory=list)
    unknown_brands: list[str] = Field(default_factory=list)
    total_records: int = 0

    @property
    def missing_brands(self) -> int:
        return len({r.brand for r in self.missing})

    @property
    def missing_models(self) -> int:
        return len({(r.brand, r.model) for r in self.missing})
