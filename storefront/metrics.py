"""Prometheus metrics for the storefront."""

from prometheus_client import Counter, Info

# Application info
app_info = Info("storefront", "Storefront application info")
app_info.info({"version": "0.1.0", "name": "storefront"})

# Traffic metrics
page_views_total = Counter(
    "storefront_page_views_total",
    "Total number of tracked page views",
    ["page"],
)

clicks_total = Counter(
    "storefront_clicks_total",
    "Total number of order/contact button clicks",
    ["click_type"],
)

# Scraper metrics
product_scrapes_total = Counter(
    "storefront_product_scrapes_total",
    "Total number of product page scrapes",
    ["platform", "status"],
)

# Bulk import metrics
bulk_imports_total = Counter(
    "storefront_bulk_imports_total",
    "Total number of bulk import runs",
    ["source", "status"],
)

bulk_import_products_total = Counter(
    "storefront_bulk_import_products_total",
    "Products processed by bulk imports",
    ["outcome"],
)

# Image proxy metrics
image_proxy_requests_total = Counter(
    "storefront_image_proxy_requests_total",
    "Total number of proxied image fetches",
    ["status"],
)


def record_page_view(page: str):
    """Record a tracked page view."""
    page_views_total.labels(page=page).inc()


def record_click(click_type: str):
    """Record an order/contact click."""
    clicks_total.labels(click_type=click_type).inc()


def record_scrape(platform: str, success: bool):
    """Record a product scrape attempt."""
    status = "success" if success else "error"
    product_scrapes_total.labels(platform=platform, status=status).inc()


def record_bulk_import(source: str, success: bool, imported: int = 0, skipped: int = 0, failed: int = 0):
    """Record a finished bulk import and its per-product outcomes."""
    status = "success" if success else "error"
    bulk_imports_total.labels(source=source, status=status).inc()
    bulk_import_products_total.labels(outcome="imported").inc(imported)
    bulk_import_products_total.labels(outcome="skipped").inc(skipped)
    bulk_import_products_total.labels(outcome="failed").inc(failed)


def record_image_proxy(status: str):
    """Record an image proxy request outcome."""
    image_proxy_requests_total.labels(status=status).inc()
