"""Best-effort product metadata scraper.

Fetches a product page and recovers title, description, image, price and
rating from meta tags, falling back through the common conventions
(Open Graph, Twitter cards, plain ``<meta name>``) and finally the page body.
"""

import html as html_lib
import logging
import re
from dataclasses import dataclass

import httpx

from storefront import metrics
from storefront.config import settings
from storefront.ingest.http_client import FetchError, fetch_page

logger = logging.getLogger(__name__)

PLATFORM_MEESHO = "Meesho"
PLATFORM_AMAZON = "Amazon"
PLATFORM_FLIPKART = "Flipkart"
PLATFORM_OTHER = "Other"

_PLATFORM_HOSTS = [
    (PLATFORM_MEESHO, ("meesho.com",)),
    (PLATFORM_AMAZON, ("amazon.in", "amazon.com", "amzn.in", "amzn.to", "amzn.eu")),
    (PLATFORM_FLIPKART, ("flipkart.com", "fkrt.it")),
]

# (pattern, key group, value group). Attribute-first patterns come first.
_META_PATTERNS = [
    (re.compile(r"""<meta[^>]+property=["']([^"']+)["'][^>]+content=["']([^"']*)["']""", re.IGNORECASE), 1, 2),
    (re.compile(r"""<meta[^>]+name=["']([^"']+)["'][^>]+content=["']([^"']*)["']""", re.IGNORECASE), 1, 2),
    (re.compile(r"""<meta[^>]+content=["']([^"']*)["'][^>]+property=["']([^"']+)["']""", re.IGNORECASE), 2, 1),
    (re.compile(r"""<meta[^>]+content=["']([^"']*)["'][^>]+name=["']([^"']+)["']""", re.IGNORECASE), 2, 1),
]

_JSON_PRICE_RE = re.compile(r'"price"\s*:\s*"?([\d,.]+)"?')
_BODY_PRICE_RE = re.compile(r"[₹$]\s*([\d,]+\.?\d*)")
_RATING_RE = re.compile(r"([\d.]+)\s*(?:out of|/)\s*5")
_JSON_RATING_RE = re.compile(r'"ratingValue"\s*:\s*"?([\d.]+)"?')

_TITLE_NOISE = [
    " | Meesho", " - Meesho", ": Buy Online",
    " | Amazon.in", " - Amazon.in", ": Amazon.in",
    " | Flipkart", " - Flipkart.com",
    "Amazon.in:", "Amazon.in :",
]


class ScrapeError(RuntimeError):
    """Raised when a product page cannot be scraped."""
    pass


@dataclass
class ProductInfo:
    """Metadata recovered from a product page."""

    url: str
    platform: str
    title: str = ""
    price: str = ""
    original_price: str = ""
    image_url: str = ""
    description: str = ""
    rating: str = ""


def detect_platform(url: str | None) -> str:
    """Marketplace name for a product URL; ``Other`` when unrecognized."""
    lowered = (url or "").lower()
    for platform, hosts in _PLATFORM_HOSTS:
        if any(host in lowered for host in hosts):
            return platform
    return PLATFORM_OTHER


def html_decode(text: str) -> str:
    return html_lib.unescape(text).replace("\xa0", " ")


def first_non_empty(*values: str) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""


def extract_meta(body: str, prop: str) -> str:
    """Content of the first ``<meta>`` whose property/name equals ``prop`` (case-insensitive)."""
    wanted = prop.lower()
    for pattern, key_group, value_group in _META_PATTERNS:
        for match in pattern.finditer(body):
            if match.group(key_group).lower() == wanted:
                return html_decode(match.group(value_group)).strip()
    return ""


def extract_tag(body: str, open_tag: str, close_tag: str) -> str:
    start = body.find(open_tag)
    if start < 0:
        return ""
    rest = body[start + len(open_tag):]
    end = rest.find(close_tag)
    if end < 0:
        return ""
    return html_decode(rest[:end]).strip()


def extract_price_from_body(body: str) -> str:
    """Price from embedded JSON, else the first currency amount in the page."""
    match = _JSON_PRICE_RE.search(body) or _BODY_PRICE_RE.search(body)
    if match:
        return "₹" + match.group(1)
    return ""


def extract_rating(body: str) -> str:
    match = _RATING_RE.search(body) or _JSON_RATING_RE.search(body)
    return match.group(1) if match else ""


def clean_title(title: str) -> str:
    """Strip marketplace names that sites append or prepend to titles."""
    for noise in _TITLE_NOISE:
        title = title.replace(noise, "")
    return title.strip()


def parse_product_page(body: str, url: str, platform: str) -> ProductInfo:
    """Apply the meta-tag fallbacks to an already fetched page."""
    info = ProductInfo(url=url, platform=platform)

    info.title = first_non_empty(
        extract_meta(body, "og:title"),
        extract_meta(body, "twitter:title"),
        extract_tag(body, "<title>", "</title>"),
    )
    info.description = first_non_empty(
        extract_meta(body, "og:description"),
        extract_meta(body, "description"),
        extract_meta(body, "twitter:description"),
    )
    info.image_url = first_non_empty(
        extract_meta(body, "og:image"),
        extract_meta(body, "twitter:image"),
    )
    info.price = first_non_empty(
        extract_meta(body, "og:price:amount"),
        extract_meta(body, "product:price:amount"),
        extract_price_from_body(body),
    )
    info.original_price = extract_meta(body, "product:original_price:amount")
    info.rating = extract_rating(body)

    info.title = clean_title(info.title)
    if not info.title:
        info.title = f"Product from {platform}"

    return info


async def scrape_product(url: str, client: httpx.AsyncClient) -> ProductInfo:
    """
    Fetch a product page and extract its metadata.

    Raises:
        ScrapeError: On an empty URL or when the page cannot be fetched.
    """
    url = (url or "").strip()
    if not url:
        raise ScrapeError("empty URL")

    platform = detect_platform(url)

    try:
        body = await fetch_page(
            client,
            url,
            timeout=settings.scrape_timeout_seconds,
            max_bytes=settings.scrape_max_bytes,
        )
    except FetchError as e:
        metrics.record_scrape(platform, success=False)
        logger.warning(f"Failed to fetch {url}: {e}")
        raise ScrapeError(f"fetch page: {e}") from e

    info = parse_product_page(body, url, platform)
    metrics.record_scrape(platform, success=True)
    logger.info(f"Scraped {platform} product '{info.title}' price={info.price or '-'}")
    return info
