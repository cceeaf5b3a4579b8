"""Product management API."""

import logging
import secrets
from datetime import datetime
from pathlib import Path
from typing import List

import httpx
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_database, get_http_client, require_admin_api
from storefront.api.routes.pages import parse_id
from storefront.catalog import repository
from storefront.catalog.categories import auto_category
from storefront.config import settings
from storefront.ingest.scraper import ScrapeError, detect_platform, scrape_product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["products"])

UPLOAD_CHUNK_SIZE = 64 * 1024


class ProductResponse(BaseModel):
    id: int
    url: str
    platform: str
    title: str
    price: str
    original_price: str
    image_url: str
    description: str
    rating: str
    category: str
    images: str
    long_description: str
    is_new: bool
    is_bestseller: bool
    added_at: datetime

    class Config:
        from_attributes = True


def _product_json(product) -> dict:
    return ProductResponse.model_validate(product).model_dump(mode="json")


def parse_flag(value: str) -> bool:
    """Integer flags: any non-zero number is true; words like ``true``/``on`` also count."""
    value = value.strip()
    try:
        return int(value) != 0
    except ValueError:
        return value.lower() in ("true", "yes", "on")


@router.get("/products", response_model=List[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_database)):
    """List all products, newest first."""
    return await repository.list_products(db)


@router.get("/product/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_database)):
    """Get a product by ID."""
    product = await repository.get_product(db, parse_id(product_id, "Invalid ID"))
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/add", dependencies=[Depends(require_admin_api)])
async def add_product(
    mode: str = Form(""),
    url: str = Form(""),
    platform: str = Form(""),
    title: str = Form(""),
    price: str = Form(""),
    original_price: str = Form(""),
    image_url: str = Form(""),
    description: str = Form(""),
    rating: str = Form(""),
    category: str = Form(""),
    images: str = Form(""),
    long_description: str = Form(""),
    db: AsyncSession = Depends(get_database),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Add a product.

    ``mode=manual`` stores the submitted fields as-is (title required).
    Any other mode scrapes ``url`` and auto-categorizes by title.
    """
    if mode == "manual":
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        fields = {
            "url": url,
            "platform": platform or detect_platform(url),
            "title": title,
            "price": price,
            "original_price": original_price,
            "image_url": image_url,
            "description": description,
            "rating": rating,
            "category": category,
            "images": images,
            "long_description": long_description,
        }
    else:
        if not url:
            raise HTTPException(status_code=400, detail="URL is required")
        try:
            info = await scrape_product(url, client)
        except ScrapeError as e:
            raise HTTPException(status_code=400, detail=f"Failed to scrape: {e}")
        fields = {
            "url": info.url,
            "platform": info.platform,
            "title": info.title,
            "price": info.price,
            "original_price": info.original_price,
            "image_url": info.image_url,
            "description": info.description,
            "rating": info.rating,
            "category": auto_category(info.title),
        }

    try:
        product = await repository.insert_product(db, **fields)
    except Exception as e:
        logger.exception("Failed to save product")
        raise HTTPException(status_code=500, detail=f"Failed to save: {e}")

    return {"ok": True, "product": _product_json(product)}


@router.post("/update/{product_id}", dependencies=[Depends(require_admin_api)])
async def update_product(
    product_id: str,
    url: str = Form(""),
    platform: str = Form(""),
    title: str = Form(""),
    price: str = Form(""),
    original_price: str = Form(""),
    image_url: str = Form(""),
    description: str = Form(""),
    rating: str = Form(""),
    category: str = Form(""),
    images: str = Form(""),
    long_description: str = Form(""),
    is_new: str = Form(""),
    is_bestseller: str = Form(""),
    db: AsyncSession = Depends(get_database),
):
    """Update a product; empty fields keep their current value."""
    pid = parse_id(product_id, "Invalid ID")
    product = await repository.get_product(db, pid)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    submitted = {
        "url": url,
        "platform": platform,
        "title": title,
        "price": price,
        "original_price": original_price,
        "image_url": image_url,
        "description": description,
        "rating": rating,
        "category": category,
        "images": images,
        "long_description": long_description,
    }
    changes = {key: value for key, value in submitted.items() if value}
    if is_new:
        changes["is_new"] = parse_flag(is_new)
    if is_bestseller:
        changes["is_bestseller"] = parse_flag(is_bestseller)

    try:
        product = await repository.update_product(db, product, **changes)
    except Exception as e:
        logger.exception(f"Failed to update product {pid}")
        raise HTTPException(status_code=500, detail=f"Failed to update: {e}")

    return {"ok": True, "product": _product_json(product)}


@router.post("/delete/{product_id}", dependencies=[Depends(require_admin_api)])
async def delete_product(product_id: str, db: AsyncSession = Depends(get_database)):
    """Delete a product. Deleting a missing product is not an error."""
    pid = parse_id(product_id, "Invalid ID")
    await repository.delete_product(db, pid)
    logger.info(f"Deleted product {pid}")
    return {"ok": True}


@router.post("/upload", dependencies=[Depends(require_admin_api)])
async def upload_image(file: UploadFile | None = File(None)):
    """Store an uploaded product image under a random name in the uploads directory."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    ext = Path(file.filename).suffix.lower()
    if ext not in settings.upload_allowed_extensions:
        raise HTTPException(status_code=400, detail="Only jpg, png, gif, webp allowed")

    uploads_dir = Path(settings.uploads_dir)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    filename = secrets.token_hex(12) + ext
    dest = uploads_dir / filename

    written = 0
    try:
        with dest.open("wb") as out:
            while True:
                chunk = await file.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.upload_max_bytes:
                    break
                out.write(chunk)
    except OSError as e:
        logger.error(f"Failed to write upload {dest}: {e}")
        raise HTTPException(status_code=500, detail="Failed to write file")

    if written > settings.upload_max_bytes:
        dest.unlink(missing_ok=True)
        raise HTTPException(status_code=413, detail="File too large")

    logger.info(f"Stored upload {filename} ({written} bytes)")
    return {"ok": True, "url": f"/uploads/{filename}"}
