"""Click tracking and analytics API."""

import logging

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.analytics.tracker import analytics_summary, record_click
from storefront.api.deps import get_database, require_admin_api

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analytics"])


@router.post("/wa-click")
async def wa_click(
    product_id: str = Form(""),
    type: str = Form("order"),
    db: AsyncSession = Depends(get_database),
):
    """Record a click on an order/contact button. Unparseable product ids are dropped."""
    pid = None
    if product_id:
        try:
            pid = int(product_id)
        except ValueError:
            logger.debug(f"Ignoring non-numeric product_id '{product_id}'")
    await record_click(db, pid, type or "order")
    return {"ok": True}


@router.get("/analytics", dependencies=[Depends(require_admin_api)])
async def get_analytics(db: AsyncSession = Depends(get_database)):
    """Analytics summary as JSON."""
    return await analytics_summary(db)
