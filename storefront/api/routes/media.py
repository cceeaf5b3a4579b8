"""Image proxy and QR code endpoints."""

import io
import logging

import httpx
import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse
from PIL import Image
from starlette.background import BackgroundTask

from storefront import metrics
from storefront.api.deps import get_http_client
from storefront.config import settings
from storefront.ingest.http_client import DESKTOP_USER_AGENT

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])

CACHE_ONE_DAY = "public, max-age=86400"


def is_allowed_image_url(url: str) -> bool:
    """Only marketplace CDN images are proxied."""
    return any(host in url for host in settings.image_proxy_allowed_hosts)


@router.get("/img")
async def image_proxy(
    url: str = "",
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Proxy a marketplace CDN image so hotlink protection does not break the page."""
    if not url:
        raise HTTPException(status_code=400, detail="missing url")
    if not is_allowed_image_url(url):
        metrics.record_image_proxy("forbidden")
        raise HTTPException(status_code=403, detail="domain not allowed")

    try:
        request = client.build_request(
            "GET",
            url,
            headers={
                "User-Agent": DESKTOP_USER_AGENT,
                "Referer": settings.image_proxy_referer,
                "Accept": "image/*,*/*",
            },
            timeout=settings.image_proxy_timeout_seconds,
        )
        resp = await client.send(request, stream=True, follow_redirects=True)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        metrics.record_image_proxy("invalid")
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        metrics.record_image_proxy("error")
        logger.warning(f"Image proxy fetch failed for {url}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    max_bytes = settings.image_proxy_max_bytes
    declared = resp.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        await resp.aclose()
        metrics.record_image_proxy("too_large")
        raise HTTPException(status_code=502, detail="image too large")

    metrics.record_image_proxy("ok")
    headers = {}
    if resp.is_success:
        headers["Cache-Control"] = CACHE_ONE_DAY
    return StreamingResponse(
        stream_capped(resp, max_bytes),
        status_code=resp.status_code,
        media_type=resp.headers.get("content-type"),
        headers=headers,
        background=BackgroundTask(resp.aclose),
    )


async def stream_capped(resp: httpx.Response, max_bytes: int):
    """Relay the upstream body, stopping once ``max_bytes`` have been sent."""
    sent = 0
    async for chunk in resp.aiter_bytes():
        remaining = max_bytes - sent
        if len(chunk) > remaining:
            yield chunk[:remaining]
            logger.warning(f"Image proxy body from {resp.url} cut at {max_bytes} bytes")
            break
        sent += len(chunk)
        yield chunk


def render_qr_png(data: str, size: int) -> bytes:
    """PNG QR code for ``data`` scaled to ``size`` x ``size`` pixels.

    A ``size`` below the code's own width (one pixel per module, quiet zone
    included) yields the code at that width instead.
    """
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=1, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    px = max(size, img.width)
    if px != img.width:
        img = img.resize((px, px), Image.Resampling.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@router.get("/api/qr")
async def qr_code(url: str = "", size: str = ""):
    """QR code PNG for a URL; ``size`` defaults to 256 and is capped at 1024."""
    if not url:
        raise HTTPException(status_code=400, detail="url parameter is required")

    px = settings.qr_default_size
    if size:
        try:
            requested = int(size)
        except ValueError:
            requested = 0
        if requested > 0:
            px = requested
    px = min(px, settings.qr_max_size)

    try:
        png = render_qr_png(url, px)
    except (ValueError, DataOverflowError) as e:
        logger.warning(f"QR generation failed: {e}")
        raise HTTPException(status_code=500, detail="failed to generate QR code")

    return Response(content=png, media_type="image/png", headers={"Cache-Control": CACHE_ONE_DAY})
