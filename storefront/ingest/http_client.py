"""Outbound HTTP fetching with status-aware error handling."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 13; SM-G991B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)


class FetchError(RuntimeError):
    """Raised when a page cannot be fetched (connection errors, timeouts)."""
    pass


class BlockedError(FetchError):
    """Raised when access is blocked (401/403 or an access-denied page)."""
    pass


def default_headers() -> dict[str, str]:
    """Get default browser-like headers."""
    return {
        "User-Agent": DESKTOP_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9,hi;q=0.8",
    }


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float,
    max_bytes: int,
    headers: Optional[dict[str, str]] = None,
) -> str:
    """
    Fetch a page body as text.

    Args:
        client: httpx AsyncClient instance
        url: URL to fetch
        timeout: Overall request timeout in seconds
        max_bytes: Body is truncated to this many bytes
        headers: Optional headers merged over the defaults

    Returns:
        Decoded response body (possibly truncated)

    Raises:
        BlockedError: On 401/403
        FetchError: On transport errors or an invalid URL
    """
    hdrs = default_headers()
    if headers:
        hdrs.update(headers)

    try:
        async with client.stream(
            "GET",
            url,
            headers=hdrs,
            timeout=timeout,
            follow_redirects=True,
        ) as resp:
            if resp.status_code in (401, 403):
                raise BlockedError(f"{resp.status_code} for {url}")
            if resp.status_code >= 400:
                logger.warning(f"HTTP {resp.status_code} fetching {url}; parsing body anyway")

            body = bytearray()
            async for chunk in resp.aiter_bytes():
                body.extend(chunk)
                if len(body) >= max_bytes:
                    del body[max_bytes:]
                    break
            encoding = resp.encoding or "utf-8"
    except httpx.InvalidURL as e:
        raise FetchError(f"invalid URL: {e}") from e
    except httpx.UnsupportedProtocol as e:
        raise FetchError(f"invalid URL: {e}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"{type(e).__name__}: {e}") from e

    try:
        return bytes(body).decode(encoding, errors="replace")
    except LookupError:
        return bytes(body).decode("utf-8", errors="replace")
