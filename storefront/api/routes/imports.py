"""Bulk import endpoints."""

import logging
from typing import List

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Form, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_database, get_http_client, require_admin_api
from storefront.ingest.marketplace import MarketplaceProduct, normalize_store_url
from storefront.worker import bulk_import

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bulk-import", tags=["bulk-import"])


@router.post("", dependencies=[Depends(require_admin_api)])
async def start_bulk_import(
    background_tasks: BackgroundTasks,
    store_url: str = Form(""),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Start importing a marketplace store in the background.

    Only one import runs at a time; poll ``/api/bulk-import/status`` for progress.
    """
    store_url = normalize_store_url(store_url)
    importer = bulk_import.bulk_importer

    if not await importer.try_start():
        raise HTTPException(status_code=409, detail="Import already running")

    logger.info(f"Starting bulk import from {store_url}")
    background_tasks.add_task(importer.run, store_url, client)
    return {"ok": True, "message": "Import started"}


@router.get("/status")
async def bulk_import_status():
    """Current or last bulk import status."""
    return await bulk_import.bulk_importer.snapshot()


@router.post("/json", dependencies=[Depends(require_admin_api)])
async def bulk_import_json(
    products: List[MarketplaceProduct],
    db: AsyncSession = Depends(get_database),
):
    """Import products already scraped elsewhere (pasted JSON array)."""
    result = await bulk_import.import_products(db, products)
    return {
        "ok": True,
        "imported": result.imported,
        "skipped": result.skipped,
        "total": result.total,
    }
