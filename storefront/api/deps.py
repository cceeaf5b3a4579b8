"""FastAPI dependencies."""

import hashlib
from typing import AsyncIterator

import httpx
from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.db.session import get_db

ADMIN_COOKIE = "admin_token"
ADMIN_COOKIE_MAX_AGE = 7 * 24 * 60 * 60
ADMIN_API_KEY_HEADER = "X-Admin-API-Key"


class LoginRequired(Exception):
    """Raised by admin page dependencies; rendered as a redirect to the login page."""
    pass


async def get_database() -> AsyncIterator[AsyncSession]:
    """Dependency for database session."""
    async for session in get_db():
        yield session
        break  # Only yield once, as FastAPI handles the session lifecycle


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound HTTP client created in the app lifespan."""
    return request.app.state.http_client


def admin_token(password: str | None = None) -> str:
    """Stable session token derived from the admin password."""
    password = settings.admin_password if password is None else password
    digest = hashlib.sha256(f"shukarsh-admin-{password}".encode()).digest()
    return digest[:16].hex()


def is_admin(request: Request) -> bool:
    """
    Check admin access for a request.

    No configured password means open access. Otherwise the ``admin_token``
    cookie must match, or the admin API key header must equal the configured key.
    """
    if not settings.admin_password:
        return True
    if request.cookies.get(ADMIN_COOKIE) == admin_token():
        return True
    api_key = request.headers.get(ADMIN_API_KEY_HEADER)
    return bool(settings.admin_api_key) and api_key == settings.admin_api_key


async def require_admin_page(request: Request) -> None:
    """Dependency for admin HTML pages; redirects to the login page."""
    if not is_admin(request):
        raise LoginRequired()


async def require_admin_api(request: Request) -> None:
    """
    Dependency for admin JSON endpoints.

    Raises:
        HTTPException: 401 when not logged in
    """
    if not is_admin(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )
