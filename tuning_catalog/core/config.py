"""Application configuration with environment variable validation."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (3 levels up from this file)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase (content store + image bucket)
    supabase_url: str = Field(..., validation_alias="SUPABASE_URL")
    supabase_key: str = Field(..., validation_alias="SUPABASE_KEY")
    supabase_storage_bucket: str = Field(
        default="catalog-images", validation_alias="SUPABASE_STORAGE_BUCKET"
    )

    # API settings
    api_admin_key: str = Field(default="", validation_alias="API_ADMIN_KEY")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        validation_alias="ALLOWED_ORIGINS",
    )
    public_base_url: str = Field(
        default="https://api.aktuning.se", validation_alias="PUBLIC_BASE_URL"
    )

    # Contact delivery (Resend HTTP API)
    resend_api_key: str = Field(default="", validation_alias="RESEND_API_KEY")
    resend_api_url: str = Field(
        default="https://api.resend.com/emails", validation_alias="RESEND_API_URL"
    )
    contact_from_email: str = Field(
        default="no-reply@aktuning.se", validation_alias="CONTACT_FROM_EMAIL"
    )
    contact_email: str = Field(
        default="info@aktuning.se", validation_alias="CONTACT_EMAIL"
    )
    contact_recipients: dict[str, str] = Field(
        default_factory=dict, validation_alias="CONTACT_RECIPIENTS"
    )

    # Rate limiting
    contact_rate_limit: str = Field(
        default="5/minute", validation_alias="CONTACT_RATE_LIMIT"
    )

    # Preferences / import history persistence: "supabase" or "memory"
    preferences_backend: str = Field(
        default="supabase", validation_alias="PREFERENCES_BACKEND"
    )

    # AKT+ option catalog cache (seconds)
    addon_cache_ttl: int = Field(default=300, validation_alias="ADDON_CACHE_TTL")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def cors_origins(self) -> list[str]:
        """Parse ALLOWED_ORIGINS from comma-separated string or return list."""
        if isinstance(self.allowed_origins, str):
            return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return self.allowed_origins

    def recipient_for_branch(self, branch: str | None) -> str:
        """Pick the inbox for a branch/location, falling back to CONTACT_EMAIL."""
        if branch:
            for name, email in self.contact_recipients.items():
                if name.lower() == branch.strip().lower():
                    return email
        return self.contact_email


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()  # type: ignore[call-arg]


def validate_settings() -> None:
    """Validate that all required settings are present."""
    settings = get_settings()
    errors = []

    if not settings.supabase_url:
        errors.append("SUPABASE_URL is required")
    if not settings.supabase_key:
        errors.append("SUPABASE_KEY is required")
    if settings.preferences_backend not in ("supabase", "memory"):
        errors.append("PREFERENCES_BACKEND must be 'supabase' or 'memory'")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")
