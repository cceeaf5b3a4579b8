"""Sitemap, robots.txt and ads.txt."""

import logging
from datetime import datetime
from pathlib import Path
from urllib.parse import quote
from xml.etree import ElementTree as ET

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_database
from storefront.catalog import repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seo"])

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
STATIC_DIR = Path(__file__).resolve().parent.parent.parent / "static"


def base_url(request: Request) -> str:
    """Public base URL, honoring reverse-proxy forwarding headers."""
    scheme = request.headers.get("x-forwarded-proto") or "https"
    host = request.headers.get("x-forwarded-host") or request.headers.get("host", "")
    return f"{scheme}://{host}"


def _add_url(
    urlset: ET.Element,
    loc: str,
    changefreq: str,
    priority: str,
    lastmod: str | None = None,
) -> None:
    url = ET.SubElement(urlset, "url")
    ET.SubElement(url, "loc").text = loc
    if lastmod:
        ET.SubElement(url, "lastmod").text = lastmod
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


@router.get("/sitemap.xml")
async def sitemap(request: Request, db: AsyncSession = Depends(get_database)):
    """Sitemap with the home page, every product page and every category page."""
    root = base_url(request)
    products = await repository.list_products(db)
    categories = await repository.list_categories(db)
    today = datetime.utcnow().strftime("%Y-%m-%d")

    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    _add_url(urlset, f"{root}/", "daily", "1.0", lastmod=today)
    for product in products:
        lastmod = product.added_at.strftime("%Y-%m-%d") if product.added_at else today
        _add_url(urlset, f"{root}/product/{product.id}", "weekly", "0.8", lastmod=lastmod)
    for category in categories:
        _add_url(urlset, f"{root}/category/{quote(category, safe='')}", "weekly", "0.6")

    ET.indent(urlset, space="  ")
    body = '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode")
    return Response(
        content=body,
        media_type="application/xml; charset=utf-8",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots_txt(request: Request):
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "Disallow: /admin\n"
        "Disallow: /api/\n"
        "Disallow: /img\n"
        "\n"
        f"Sitemap: {base_url(request)}/sitemap.xml\n"
    )


@router.get("/ads.txt")
async def ads_txt():
    path = STATIC_DIR / "ads.txt"
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(path, media_type="text/plain")
