"""Admin panel pages and cookie login."""

import hmac
import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.analytics.tracker import analytics_summary
from storefront.api.deps import (
    ADMIN_COOKIE,
    ADMIN_COOKIE_MAX_AGE,
    admin_token,
    get_database,
    is_admin,
    require_admin_page,
)
from storefront.api.templating import templates
from storefront.catalog import repository
from storefront.catalog.categories import CATEGORIES
from storefront.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("", response_class=HTMLResponse, dependencies=[Depends(require_admin_page)])
async def admin_panel(request: Request, db: AsyncSession = Depends(get_database)):
    """Product management page."""
    products = await repository.list_products(db)
    return templates.TemplateResponse(
        request,
        "admin.html",
        {"products": products, "category_options": CATEGORIES},
    )


@router.get("/analytics", response_class=HTMLResponse, dependencies=[Depends(require_admin_page)])
async def admin_analytics(request: Request, db: AsyncSession = Depends(get_database)):
    """Traffic and click analytics for the last 30 days."""
    summary = await analytics_summary(db)
    return templates.TemplateResponse(request, "analytics.html", summary)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, error: str = ""):
    if not settings.admin_password or is_admin(request):
        return RedirectResponse("/admin", status_code=302)
    return templates.TemplateResponse(request, "login.html", {"error": error})


@router.post("/login")
async def login(password: str = Form("")):
    if not hmac.compare_digest(password.encode(), settings.admin_password.encode()):
        logger.warning("Failed admin login attempt")
        return RedirectResponse("/admin/login?error=Wrong+password", status_code=302)

    response = RedirectResponse("/admin", status_code=302)
    response.set_cookie(
        ADMIN_COOKIE,
        admin_token(),
        max_age=ADMIN_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
    )
    logger.info("Admin logged in")
    return response


@router.get("/logout")
async def logout():
    response = RedirectResponse("/", status_code=302)
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return response
