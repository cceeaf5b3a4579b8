#!/usr/bin/env python3
"""
Import marketplace products from a JSON file.

The file holds a JSON array of product objects in the same shape the
``/api/bulk-import/json`` endpoint accepts:

- Required fields: meesho_id, name
- Optional fields: slug, original_slug, price, catalog_price, description,
  image, images, category, rating, rating_count, url

Products whose title already exists in the catalog are skipped.

Usage:
    python scripts/import_products.py products.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import TypeAdapter, ValidationError

from storefront.db.models import Base
from storefront.db.session import AsyncSessionLocal, engine
from storefront.ingest.marketplace import MarketplaceProduct
from storefront.logging_config import setup_logging
from storefront.worker.bulk_import import import_products


def load_products(path: Path) -> list[MarketplaceProduct]:
    """Read and validate the product array."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return TypeAdapter(list[MarketplaceProduct]).validate_python(data)


async def run(path: Path) -> int:
    if not path.exists():
        print(f"Error: {path} not found")
        return 1

    try:
        products = load_products(path)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {path}: {e}")
        return 1
    except ValidationError as e:
        print(f"Error: Invalid product data in {path}:\n{e}")
        return 1

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        result = await import_products(db, products)

    await engine.dispose()

    print(
        f"Imported {result.imported}, skipped {result.skipped} "
        f"(already exist), failed {result.failed} of {result.total}"
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Import marketplace products from JSON")
    parser.add_argument("file", type=Path, help="JSON array of products")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run(args.file)))


if __name__ == "__main__":
    main()
