"""Main application entry point."""

import argparse
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import settings
from storefront.db.session import engine
from storefront.db.models import Base
from storefront.api.deps import LoginRequired
from storefront.api.routes import admin, analytics, imports, media, pages, products, seo

from storefront.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting {settings.site_name} storefront...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.http_client = httpx.AsyncClient(follow_redirects=True)

    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD is not set; the admin panel is open to everyone")

    yield

    logger.info("Shutting down...")
    await app.state.http_client.aclose()
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Storefront",
    description="Product showcase with scraping, analytics and bulk import",
    version="0.1.0",
    lifespan=lifespan,
)

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=True,
    excluded_handlers=["/metrics", "/health", "/favicon.ico", "/static/.*", "/uploads/.*"],
)
instrumentator.instrument(app).expose(app, include_in_schema=False, tags=["monitoring"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """JSON ``{"error": ...}`` bodies for the API, plain text for pages."""
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/admin/login", status_code=302)


app.include_router(pages.router)
app.include_router(admin.router)
app.include_router(products.router)
app.include_router(analytics.router)
app.include_router(imports.router)
app.include_router(media.router)
app.include_router(seo.router)

Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon response to avoid 404 noise."""
    return Response(status_code=204)


def parse_listen(listen: str) -> tuple[str, int]:
    """Split ``host:port`` (host optional, as in ``:8000``)."""
    host, _, port = listen.rpartition(":")
    return host or "0.0.0.0", int(port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the storefront server")
    parser.add_argument(
        "--listen",
        default=f"{settings.app_host}:{settings.app_port}",
        help="address to listen on (host:port)",
    )
    parser.add_argument(
        "--admin-password",
        default="",
        help="admin panel password (or ADMIN_PASSWORD env var)",
    )
    args = parser.parse_args(argv)

    if args.admin_password:
        settings.admin_password = args.admin_password

    host, port = parse_listen(args.listen)
    logger.info(f"Listening on {host}:{port}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
