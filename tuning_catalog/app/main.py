"""FastAPI application for the Tuning Catalog API."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ..api import catalog, contact, imports, reseller
from ..api.deps import close_mailer, get_catalog_service, limiter
from ..core.config import get_settings, validate_settings
from ..core.exceptions import CatalogError
from ..core.logging import log_error, log_request, log_response, logger, request_reseller

# Validate settings on startup
try:
    validate_settings()
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - initialize services on startup."""
    logger.info("Starting Tuning Catalog API...")
    get_catalog_service()
    logger.info("Catalog service initialized")
    yield
    logger.info("Shutting down...")
    await close_mailer()


app = FastAPI(
    title="Tuning Catalog API",
    description="Vehicle tuning catalog with reseller storefronts and catalog import",
    version="1.0.0",
    lifespan=lifespan,
)

# State for limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Admin-Key",
        "X-Reseller-Id",
        "X-Reseller-Key",
    ],
)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        log_error(exc.message, exc, path=request.url.path)
    else:
        logger.info(f"{type(exc).__name__} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    reseller_id = request_reseller(request.url.path, request.headers)
    log_request(request.method, request.url.path, reseller_id)

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    log_response(
        request.method, request.url.path, response.status_code, duration_ms, reseller_id
    )

    return response


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


app.include_router(catalog.router)
app.include_router(reseller.router)
app.include_router(imports.router)
app.include_router(contact.router)
