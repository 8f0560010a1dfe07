"""FastAPI dependency injection for services, stores and authentication."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..core.config import Settings, get_settings
from ..core.logging import log_error, logger
from ..db import resellers as resellers_db
from ..services.catalog import CatalogService
from ..services.contact import ContactMailer
from ..services.preferences import (
    ImportHistory,
    KeyValueStore,
    LanguagePreference,
    create_store,
)

# Rate limiter shared by the app and the routers that decorate endpoints
limiter = Limiter(key_func=get_remote_address)

# -----------------------------------------------------------------------------
# Service singletons
# -----------------------------------------------------------------------------

_catalog_service: CatalogService | None = None
_mailer: ContactMailer | None = None
_kv_store: KeyValueStore | None = None


def get_catalog_service() -> CatalogService:
    """Get or create the catalog service (holds the AKT+ option cache)."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service


def get_mailer() -> ContactMailer:
    global _mailer
    if _mailer is None:
        _mailer = ContactMailer()
    return _mailer


async def close_mailer() -> None:
    global _mailer
    if _mailer is not None:
        await _mailer.close()
        _mailer = None


def get_kv_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> KeyValueStore:
    global _kv_store
    if _kv_store is None:
        _kv_store = create_store(settings.preferences_backend)
    return _kv_store


def get_import_history(
    store: Annotated[KeyValueStore, Depends(get_kv_store)],
) -> ImportHistory:
    return ImportHistory(store)


def get_language_preference(
    store: Annotated[KeyValueStore, Depends(get_kv_store)],
) -> LanguagePreference:
    return LanguagePreference(store)


# -----------------------------------------------------------------------------
# Admin Authentication
# -----------------------------------------------------------------------------


async def verify_admin_key(
    request: Request,
    x_admin_key: Annotated[str | None, Header()] = None,
    settings: Settings = Depends(get_settings),
) -> bool:
    """Verify admin API key for protected endpoints."""
    if not settings.api_admin_key:
        logger.warning("API_ADMIN_KEY not set - admin endpoints unprotected")
        raise HTTPException(
            status_code=503,
            detail="Admin endpoints not configured. Set API_ADMIN_KEY environment variable.",
        )

    if not x_admin_key:
        raise HTTPException(
            status_code=401,
            detail="Missing X-Admin-Key header",
        )

    if x_admin_key != settings.api_admin_key:
        logger.warning(f"Invalid admin key attempt from {request.client}")
        raise HTTPException(
            status_code=403,
            detail="Invalid admin key",
        )

    return True


# -----------------------------------------------------------------------------
# Reseller Authentication
# -----------------------------------------------------------------------------


async def get_reseller_id(
    x_reseller_id: Annotated[str | None, Header()] = None,
    x_reseller_key: Annotated[str | None, Header()] = None,
) -> str:
    """Authenticate a reseller by id + API key headers; 401 with no detail otherwise."""
    if not x_reseller_id or not x_reseller_key:
        raise HTTPException(status_code=401)
    try:
        valid = await resellers_db.verify_reseller_key(x_reseller_id, x_reseller_key)
    except Exception as e:
        log_error("Reseller key check failed", e, reseller_id=x_reseller_id)
        raise HTTPException(status_code=401)
    if not valid:
        logger.warning(f"Invalid reseller key for reseller={x_reseller_id}")
        raise HTTPException(status_code=401)
    return x_reseller_id
