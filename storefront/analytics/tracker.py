"""Page view and click tracking, plus the aggregate queries behind the analytics page."""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import uuid4

from fastapi import BackgroundTasks, Request, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront import metrics
from storefront.catalog import repository
from storefront.db.models import PageView, Product, WhatsAppClick
from storefront.db import session as db_session

logger = logging.getLogger(__name__)

VISITOR_COOKIE = "vid"
VISITOR_COOKIE_MAX_AGE = 365 * 24 * 60 * 60
ANALYTICS_WINDOW_DAYS = 30
TOP_PRODUCTS_LIMIT = 10


async def record_page_view(
    path: str,
    product_id: Optional[int] = None,
    referrer: str = "",
    user_agent: str = "",
    visitor_id: str = "",
) -> None:
    """Insert a page view in its own session. Tracking never breaks a page."""
    try:
        async with db_session.AsyncSessionLocal() as db:
            db.add(
                PageView(
                    path=path,
                    product_id=product_id,
                    referrer=referrer,
                    user_agent=user_agent,
                    visitor_id=visitor_id,
                )
            )
            await db.commit()
    except Exception:
        logger.exception(f"Failed to record page view for {path}")


def track_view(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    page: str,
    product_id: Optional[int] = None,
) -> None:
    """
    Schedule a page view insert for after the response is sent.

    Visitors are identified by the ``vid`` cookie; one is issued when missing.
    """
    visitor_id = request.cookies.get(VISITOR_COOKIE, "")
    if not visitor_id:
        visitor_id = uuid4().hex
        response.set_cookie(
            VISITOR_COOKIE,
            visitor_id,
            max_age=VISITOR_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )

    metrics.record_page_view(page)
    background_tasks.add_task(
        record_page_view,
        path=request.url.path,
        product_id=product_id,
        referrer=request.headers.get("referer", ""),
        user_agent=request.headers.get("user-agent", ""),
        visitor_id=visitor_id,
    )


async def record_click(db: AsyncSession, product_id: Optional[int], click_type: str = "order") -> None:
    db.add(WhatsAppClick(product_id=product_id, click_type=click_type or "order"))
    await db.commit()
    metrics.record_click(click_type or "order")


def _today_start() -> datetime:
    return datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


async def site_stats(db: AsyncSession) -> dict[str, int]:
    """Public counters shown on the home page."""
    return {
        "total_views": await _count(db, select(func.count(PageView.id))),
        "unique_visitors": await _count(
            db,
            select(func.count(func.distinct(PageView.visitor_id))).where(PageView.visitor_id != ""),
        ),
        "wa_clicks": await _count(db, select(func.count(WhatsAppClick.id))),
    }


async def views_per_day(db: AsyncSession, days: int = ANALYTICS_WINDOW_DAYS) -> list[dict[str, Any]]:
    cutoff = datetime.utcnow() - timedelta(days=days)
    day = func.date(PageView.created_at)
    result = await db.execute(
        select(day.label("day"), func.count(PageView.id).label("views"))
        .where(PageView.created_at >= cutoff)
        .group_by(day)
        .order_by(day)
    )
    return [{"day": str(row.day), "views": row.views} for row in result.all()]


async def top_products(
    db: AsyncSession,
    days: int = ANALYTICS_WINDOW_DAYS,
    limit: int = TOP_PRODUCTS_LIMIT,
) -> list[dict[str, Any]]:
    cutoff = datetime.utcnow() - timedelta(days=days)
    views = func.count(PageView.id).label("views")
    result = await db.execute(
        select(Product.id, Product.title, Product.image_url, views)
        .join(Product, Product.id == PageView.product_id)
        .where(PageView.product_id.is_not(None), PageView.created_at >= cutoff)
        .group_by(Product.id, Product.title, Product.image_url)
        .order_by(views.desc())
        .limit(limit)
    )
    return [
        {"id": row.id, "title": row.title, "image_url": row.image_url, "views": row.views}
        for row in result.all()
    ]


async def clicks_by_type(db: AsyncSession) -> list[dict[str, Any]]:
    clicks = func.count(WhatsAppClick.id).label("clicks")
    result = await db.execute(
        select(WhatsAppClick.click_type, clicks)
        .group_by(WhatsAppClick.click_type)
        .order_by(WhatsAppClick.click_type)
    )
    return [{"click_type": row.click_type, "clicks": row.clicks} for row in result.all()]


async def analytics_summary(db: AsyncSession) -> dict[str, Any]:
    """Everything the admin analytics page shows."""
    today = _today_start()
    stats = await site_stats(db)
    return {
        "views_per_day": await views_per_day(db),
        "top_products": await top_products(db),
        "total_views": stats["total_views"],
        "today_views": await _count(
            db, select(func.count(PageView.id)).where(PageView.created_at >= today)
        ),
        "total_wa": stats["wa_clicks"],
        "today_wa": await _count(
            db, select(func.count(WhatsAppClick.id)).where(WhatsAppClick.created_at >= today)
        ),
        "unique_visitors": stats["unique_visitors"],
        "wa_by_type": await clicks_by_type(db),
        "product_count": await repository.count_products(db),
    }
