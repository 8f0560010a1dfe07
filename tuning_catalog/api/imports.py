"""Admin routes: vendor catalog import and image upload.

Requires X-Admin-Key header for authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..core.logging import log_error, logger
from ..db import assets
from ..db import catalog as catalog_db
from ..models.imports import ImportSummary
from ..models.requests import CatalogCompareRequest, ImageUploadRequest, ImportMissingRequest
from ..services import catalog_import
from ..services.preferences import ImportHistory
from .deps import get_import_history, verify_admin_key

router = APIRouter(prefix="/api", dependencies=[Depends(verify_admin_key)])

HistoryDep = Annotated[ImportHistory, Depends(get_import_history)]


@router.post("/import/compare")
async def compare_catalog(body: CatalogCompareRequest, history: HistoryDep):
    """List vendor catalog entries that do not exist in the catalog yet."""
    records = catalog_import.parse_vendor_catalog(body.catalog)
    try:
        brands = await catalog_db.fetch_brands()
    except Exception as e:
        log_error("Failed to load catalog for compare", e)
        raise HTTPException(status_code=502, detail="Failed to load catalog")

    comparison = catalog_import.find_missing(records, brands)
    await catalog_import.record_history(
        history,
        "compare",
        {"total": comparison.total_records, "missing": len(comparison.missing)},
    )
    return {
        "missing": comparison.missing,
        "unknown_brands": comparison.unknown_brands,
        "summary": {
            "total_records": comparison.total_records,
            "total_missing": len(comparison.missing),
            "brands": comparison.missing_brands,
            "models": comparison.missing_models,
        },
    }


@router.post("/import/missing", response_model=ImportSummary)
async def import_missing(body: ImportMissingRequest, history: HistoryDep):
    """Create missing model/year/engine paths, one record at a time."""
    summary = await catalog_import.import_records(body.items, history)
    logger.info(f"Imported {summary.created} of {len(body.items)} records")
    return summary


@router.get("/import/history")
async def import_history(history: HistoryDep):
    return {"history": await history.entries()}


@router.post("/upload-image")
async def upload_image(body: ImageUploadRequest):
    """Upload a base64 image to the storage bucket; returns its public URL."""
    try:
        return await assets.upload_image(body.image_data, body.filename, body.folder)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log_error("Image upload failed", e, filename=body.filename)
        raise HTTPException(status_code=500, detail="Failed to upload image")
