"""Enums and constants for the tuning catalog."""

from enum import Enum


class FuelType(str, Enum):
    """Fuel types as stored on engines (Swedish display names)."""

    PETROL = "Bensin"
    DIESEL = "Diesel"
    HYBRID = "Hybrid"
    ELECTRIC = "El"

    @classmethod
    def from_string(cls, value: str | None) -> "FuelType | None":
        """Convert a free-text fuel label to an enum, handling common variations."""
        if not value:
            return None
        mappings = {
            "bensin": cls.PETROL,
            "petrol": cls.PETROL,
            "gasoline": cls.PETROL,
            "benzin": cls.PETROL,
            "diesel": cls.DIESEL,
            "hybrid": cls.HYBRID,
            "el": cls.ELECTRIC,
            "electric": cls.ELECTRIC,
        }
        return mappings.get(value.strip().lower())


class ImportStatus(str, Enum):
    """Per-record outcome of a bulk catalog import."""

    CREATED = "created"
    EXISTS = "exists"
    ERROR = "error"


class Language(str, Enum):
    """Languages the storefront is translated into."""

    SV = "sv"
    EN = "en"
    DE = "de"

    @classmethod
    def from_string(cls, value: str | None) -> "Language":
        """Convert to enum, falling back to Swedish."""
        if not value:
            return cls.SV
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.SV


# Stage names offered in bulk pricing, in display order
BULK_STAGE_NAMES: tuple[str, ...] = ("Steg 1", "Steg 2", "Steg 3", "Steg 4", "DSG")

# Name given to the single stage seeded on imported engines
IMPORT_SEED_STAGE = "Steg 1"

# Keys a vendor catalog may use for its first stage
VENDOR_FIRST_STAGE_KEYS: tuple[str, ...] = ("Stage 1", "Steg 1")

# Static exchange rates, SEK is base (1 SEK = rate units of currency)
DEFAULT_CURRENCY = "SEK"
EXCHANGE_RATES: dict[str, float] = {
    "SEK": 1.0,
    "EUR": 0.1,
    "USD": 0.095,
    "GBP": 0.08,
}
