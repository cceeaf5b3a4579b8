"""Meesho store-page parsing for bulk catalog imports.

Supplier and category pages are Next.js apps; the product listing lives in
the ``__NEXT_DATA__`` payload under ``props.pageProps.initialState``.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from storefront.catalog.categories import map_marketplace_category
from storefront.catalog.pricing import rupees
from storefront.config import settings
from storefront.ingest.http_client import MOBILE_USER_AGENT, BlockedError, fetch_page
from storefront.ingest.json_extractor import find_next_data_script, navigate_json
from storefront.ingest.scraper import PLATFORM_MEESHO

logger = logging.getLogger(__name__)

PRODUCT_URL_BASE = "https://www.meesho.com/"

# Shop pages first, then the home/category listing
LISTING_PATHS = [
    ("props", "pageProps", "initialState", "shopListing", "listing"),
    ("props", "pageProps", "initialState", "hpListing", "listing"),
]


class MarketplaceParseError(RuntimeError):
    """Raised when a store page does not contain a usable product listing."""
    pass


class MarketplaceProduct(BaseModel):
    """A product as listed on a marketplace store page."""

    meesho_id: int = 0
    name: str = ""
    slug: str = ""
    original_slug: str = ""
    price: int = 0
    catalog_price: int = 0
    description: str = ""
    image: str = ""
    images: list[str] = Field(default_factory=list)
    category: str = ""
    rating: str = ""
    rating_count: int = 0
    url: str = ""


def _number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_product(raw: dict[str, Any]) -> MarketplaceProduct:
    """Build a MarketplaceProduct from one listing entry, ignoring mistyped fields."""
    mp = MarketplaceProduct()

    mp.meesho_id = _number(raw.get("id")) or 0
    mp.name = (_text(raw.get("name")) or "").strip()
    mp.slug = _text(raw.get("slug")) or ""
    mp.original_slug = _text(raw.get("original_slug")) or ""
    mp.price = _number(raw.get("min_product_price")) or 0
    mp.catalog_price = _number(raw.get("min_catalog_price")) or 0
    mp.description = (_text(raw.get("description")) or "").strip() or mp.name
    mp.image = _text(raw.get("image")) or ""
    mp.category = _text(raw.get("sub_sub_category_name")) or ""

    images = raw.get("images")
    if isinstance(images, list):
        mp.images = [img for img in images if isinstance(img, str)]
    if not mp.images:
        product_images = raw.get("product_images")
        if isinstance(product_images, list):
            mp.images = [
                pi["url"]
                for pi in product_images
                if isinstance(pi, dict) and isinstance(pi.get("url"), str)
            ]

    summary = raw.get("supplier_reviews_summary")
    if isinstance(summary, dict):
        mp.rating = _text(summary.get("average_rating_str")) or ""
        mp.rating_count = _number(summary.get("rating_count")) or 0

    if mp.original_slug:
        mp.url = f"{PRODUCT_URL_BASE}{mp.slug}/p/{mp.original_slug}"
    elif mp.slug:
        mp.url = f"{PRODUCT_URL_BASE}{mp.slug}"

    return mp


def parse_store_page(html: str) -> tuple[list[MarketplaceProduct], int]:
    """
    Extract products and the store's total product count from a store page.

    Raises:
        BlockedError: When the page is an access-denied interstitial.
        MarketplaceParseError: When the listing cannot be located or is empty.
    """
    script = find_next_data_script(html)
    if script is None:
        if "Access Denied" in html:
            raise BlockedError("Meesho blocked the request. Try again in a few minutes")
        raise MarketplaceParseError("could not find product data on page")

    try:
        data = json.loads(script)
    except json.JSONDecodeError as e:
        raise MarketplaceParseError(f"failed to parse page data: {e}") from e

    listing = None
    for path in LISTING_PATHS:
        try:
            listing = navigate_json(data, *path)
            break
        except KeyError:
            continue
    if listing is None:
        raise MarketplaceParseError("could not find listing data")
    if not isinstance(listing, dict):
        raise MarketplaceParseError("unexpected listing format")

    total_count = _number(listing.get("productsCount")) or 0

    pages = listing.get("products")
    if not isinstance(pages, list) or not pages:
        raise MarketplaceParseError("no products found")

    products = []
    for page in pages:
        if not isinstance(page, dict):
            continue
        entries = page.get("products")
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, dict):
                products.append(parse_product(entry))

    return products, total_count


def normalize_store_url(store_url: str | None) -> str:
    """Default to the configured store; bare store names become full URLs."""
    store_url = (store_url or "").strip()
    if not store_url:
        return settings.marketplace_store_url
    if not store_url.startswith("http"):
        return settings.marketplace_base_url + store_url
    return store_url


async def fetch_store_products(
    client: httpx.AsyncClient, store_url: str
) -> tuple[list[MarketplaceProduct], int]:
    """Fetch a store page with a mobile user agent and parse its listing."""
    try:
        html = await fetch_page(
            client,
            store_url,
            timeout=settings.marketplace_timeout_seconds,
            max_bytes=settings.marketplace_max_bytes,
            headers={"User-Agent": MOBILE_USER_AGENT, "Accept-Language": "en-US,en;q=0.9"},
        )
    except BlockedError as e:
        raise BlockedError(
            "Meesho blocked the request (403). Try again in a few minutes"
        ) from e
    return parse_store_page(html)


def to_product_fields(mp: MarketplaceProduct) -> dict[str, Any]:
    """Catalog columns for inserting a marketplace product."""
    image_url = mp.image or (mp.images[0] if mp.images else "")
    return {
        "url": mp.url,
        "platform": PLATFORM_MEESHO,
        "title": mp.name,
        "price": rupees(mp.price),
        "original_price": rupees(mp.catalog_price) if mp.catalog_price > mp.price else "",
        "image_url": image_url,
        "description": mp.description,
        "rating": mp.rating,
        "category": map_marketplace_category(mp.category),
        "images": json.dumps(mp.images, ensure_ascii=False),
    }
