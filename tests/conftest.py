"""Shared fixtures: a throwaway SQLite database and an in-process app client."""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.sqlite3"
os.environ["UPLOADS_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["ADMIN_PASSWORD"] = ""
os.environ["ADMIN_API_KEY"] = ""
os.environ["WHATSAPP_NUMBER"] = "919999999999"

import httpx
import pytest
import pytest_asyncio

from storefront.config import settings
from storefront.db.models import Base
from storefront.db.session import AsyncSessionLocal, engine


class Upstream:
    """Canned responses for outbound requests, keyed by full URL."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status=200, text=None, content=None, headers=None, error=None):
        self.routes[url] = (status, text, content, headers, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        status, text, content, headers, error = route
        if error is not None:
            raise error
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        return httpx.Response(status, content=content or b"", headers=headers)


@pytest.fixture
def upstream():
    return Upstream()


@pytest_asyncio.fixture
async def outbound(upstream):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def db_session():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session, outbound):
    from storefront.api.deps import get_http_client
    from storefront.main import app

    app.dependency_overrides[get_http_client] = lambda: outbound
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_password(monkeypatch):
    """Protect the admin area with a password for the duration of a test."""
    monkeypatch.setattr(settings, "admin_password", "s3cret")
    return "s3cret"
