"""Background bulk import of a marketplace store into the catalog."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront import metrics
from storefront.catalog import repository
from storefront.db import session as db_session
from storefront.ingest.marketplace import (
    MarketplaceProduct,
    fetch_store_products,
    to_product_fields,
)
from storefront.logging_config import get_logger

logger = logging.getLogger(__name__)

StoreFetcher = Callable[[httpx.AsyncClient, str], Awaitable[tuple[List[MarketplaceProduct], int]]]


@dataclass
class BulkImportStatus:
    """Progress of the current (or last) bulk import."""

    running: bool = False
    total: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    products: List[MarketplaceProduct] = field(default_factory=list)
    message: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


@dataclass
class ImportResult:
    """Outcome of a synchronous JSON import."""

    imported: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0


class BulkImporter:
    """
    Runs one store import at a time.

    The status is shared with the status endpoint, so every read and write
    goes through ``_lock``. A second ``try_start`` while a run is in progress
    is refused rather than queued.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        fetcher: Optional[StoreFetcher] = None,
    ):
        self._session_factory = session_factory
        self._fetcher = fetcher or fetch_store_products
        self._lock = asyncio.Lock()
        self.status = BulkImportStatus()

    @property
    def session_factory(self) -> async_sessionmaker:
        return self._session_factory or db_session.AsyncSessionLocal

    async def try_start(self) -> bool:
        """Reset the status and mark a run as started; False if one is already running."""
        async with self._lock:
            if self.status.running:
                return False
            self.status = BulkImportStatus(
                running=True,
                message="Starting import...",
                started_at=datetime.utcnow(),
            )
            return True

    async def _update(self, **changes: Any) -> None:
        async with self._lock:
            for key, value in changes.items():
                setattr(self.status, key, value)

    async def _record_error(self, error: str, *, failed: bool = False) -> None:
        async with self._lock:
            self.status.errors.append(error)
            if failed:
                self.status.failed += 1

    async def snapshot(self) -> dict[str, Any]:
        """JSON-ready copy of the current status."""
        async with self._lock:
            s = self.status
            data = {
                "running": s.running,
                "total": s.total,
                "imported": s.imported,
                "skipped": s.skipped,
                "failed": s.failed,
                "errors": list(s.errors),
                "message": s.message,
                "started_at": s.started_at.isoformat() if s.started_at else None,
            }
            if s.products:
                data["products"] = [mp.model_dump() for mp in s.products]
            if s.finished_at is not None:
                data["finished_at"] = s.finished_at.isoformat()
        return data

    async def run(self, store_url: str, client: httpx.AsyncClient) -> None:
        """
        Import every product listed on ``store_url``.

        Must follow a successful ``try_start``. Products whose title already
        exists in the catalog are skipped; insert failures are counted and the
        run continues.
        """
        log = get_logger(__name__, store_url=store_url, platform="Meesho", job="bulk_import")
        success = False
        try:
            await self._update(message="Fetching store page...")
            try:
                products, total_count = await self._fetcher(client, store_url)
            except Exception as e:
                log.warning(f"Bulk import failed: {e}")
                await self._update(message=f"Error: {e}")
                await self._record_error(str(e))
                return

            await self._update(
                total=len(products),
                message=(
                    f"Found {len(products)} products (of {total_count} total in store). "
                    "Importing..."
                ),
            )

            async with self.session_factory() as db:
                existing = await repository.existing_title_keys(db)

                for i, mp in enumerate(products, start=1):
                    await self._update(message=f"Processing {i}/{len(products)}: {mp.name}")

                    key = repository.title_key(mp.name)
                    if key in existing:
                        async with self._lock:
                            self.status.skipped += 1
                        continue

                    try:
                        await repository.insert_product(db, **to_product_fields(mp))
                    except Exception as e:
                        await db.rollback()
                        log.bind(product_id=mp.meesho_id).warning(f"Failed to import '{mp.name}': {e}")
                        await self._record_error(f"{mp.name}: {e}", failed=True)
                        continue

                    existing.add(key)
                    async with self._lock:
                        self.status.imported += 1
                        self.status.products.append(mp)

            async with self._lock:
                s = self.status
                s.message = (
                    f"Done! Imported {s.imported}, skipped {s.skipped} (already exist), "
                    f"failed {s.failed}"
                )
            success = True
            log.info(f"Bulk import finished: {self.status.message}")
        finally:
            async with self._lock:
                self.status.running = False
                self.status.finished_at = datetime.utcnow()
                s = self.status
            metrics.record_bulk_import(
                "store", success, imported=s.imported, skipped=s.skipped, failed=s.failed
            )


async def import_products(
    db: AsyncSession,
    products: Iterable[MarketplaceProduct],
) -> ImportResult:
    """Import already-scraped marketplace products, skipping known titles."""
    products = list(products)
    result = ImportResult(total=len(products))
    existing = await repository.existing_title_keys(db)

    for mp in products:
        key = repository.title_key(mp.name)
        if key in existing:
            result.skipped += 1
            continue
        try:
            await repository.insert_product(db, **to_product_fields(mp))
        except Exception as e:
            await db.rollback()
            logger.warning(f"Failed to import '{mp.name}': {e}")
            result.failed += 1
            continue
        result.imported += 1
        existing.add(key)

    metrics.record_bulk_import(
        "json", True, imported=result.imported, skipped=result.skipped, failed=result.failed
    )
    return result


bulk_importer = BulkImporter()
