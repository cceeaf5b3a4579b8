"""Public storefront pages."""

import logging
import re

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.analytics.tracker import site_stats, track_view
from storefront.api.deps import get_database
from storefront.api.templating import templates
from storefront.catalog import repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_id(raw: str, detail: str = "Invalid product ID") -> int:
    """Parse a path id as a signed 64-bit integer; no whitespace or underscores."""
    if not ID_PATTERN.fullmatch(raw):
        raise HTTPException(status_code=400, detail=detail)
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise HTTPException(status_code=400, detail=detail)
    return value


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_database),
):
    """Home page: catalog grouped by category, carousel and site stats."""
    products = await repository.list_products(db)
    new_arrivals = await repository.list_new_arrivals(db)
    bestsellers = await repository.list_bestsellers(db)
    by_category = repository.group_by_category(products)
    stats = await site_stats(db)

    response = templates.TemplateResponse(
        request,
        "home.html",
        {
            "products": products,
            "categories": list(by_category.keys()),
            "by_category": by_category,
            "new_arrivals": new_arrivals,
            "bestsellers": bestsellers,
            "featured": repository.featured_products(bestsellers, new_arrivals, products),
            "stats": stats,
        },
    )
    track_view(request, response, background_tasks, page="home")
    return response


@router.get("/product/{product_id}", response_class=HTMLResponse)
async def product_detail(
    product_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_database),
):
    """Product page with gallery and related products from the same category."""
    pid = parse_id(product_id)
    product = await repository.get_product(db, pid)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    related = []
    if product.category:
        related = repository.related_products(
            product, await repository.list_by_category(db, product.category)
        )

    response = templates.TemplateResponse(
        request,
        "product.html",
        {
            "product": product,
            "images": product.gallery,
            "related": related,
        },
    )
    track_view(request, response, background_tasks, page="product", product_id=pid)
    return response


@router.get("/search", response_class=HTMLResponse)
async def search(
    request: Request,
    background_tasks: BackgroundTasks,
    q: str = "",
    db: AsyncSession = Depends(get_database),
):
    """Search titles, descriptions and categories."""
    products = await repository.search_products(db, q) if q else []
    response = templates.TemplateResponse(
        request,
        "search.html",
        {"query": q, "products": products, "count": len(products)},
    )
    track_view(request, response, background_tasks, page="search")
    return response


@router.get("/category/{name}", response_class=HTMLResponse)
async def category(
    name: str,
    request: Request,
    background_tasks: BackgroundTasks,
    sort: str = "",
    db: AsyncSession = Depends(get_database),
):
    """Category listing with optional price/newest/bestseller sort."""
    products = repository.sort_products(await repository.list_by_category(db, name), sort)
    categories = await repository.list_categories(db)
    response = templates.TemplateResponse(
        request,
        "category.html",
        {
            "category": name,
            "products": products,
            "count": len(products),
            "sort": sort,
            "sort_keys": repository.SORT_KEYS,
            "categories": categories,
        },
    )
    track_view(request, response, background_tasks, page="category")
    return response
