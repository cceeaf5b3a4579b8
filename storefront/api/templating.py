"""Jinja2 template environment shared by the page routes."""

from pathlib import Path
from urllib.parse import quote

from fastapi.templating import Jinja2Templates

from storefront.catalog.categories import category_emoji, category_gif
from storefront.catalog.pricing import discount_pct, fmt_price
from storefront.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def img_src(url: str | None) -> str:
    """Local uploads and static files load directly; remote images go through the proxy."""
    if not url:
        return ""
    if url.startswith("/uploads/") or url.startswith("/static/"):
        return url
    return "/img?url=" + quote(url, safe="")


env = templates.env
env.filters["fmt_price"] = fmt_price
env.filters["img_src"] = img_src
env.filters["cat_emoji"] = category_emoji
env.filters["cat_gif"] = category_gif
env.globals["discount_pct"] = discount_pct
env.globals["site_name"] = settings.site_name
env.globals["whatsapp_number"] = settings.whatsapp_number
