"""Product queries and catalog-shaping helpers."""

import logging
from collections import OrderedDict
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.pricing import parse_price
from storefront.db.models import Product

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "Other"

# Columns an admin may set through the add/update endpoints
EDITABLE_FIELDS = (
    "url",
    "platform",
    "title",
    "price",
    "original_price",
    "image_url",
    "description",
    "rating",
    "category",
    "images",
    "long_description",
    "is_new",
    "is_bestseller",
)

SORT_KEYS = ("price-asc", "price-desc", "newest", "bestseller")


def _newest_first(query):
    return query.order_by(Product.added_at.desc(), Product.id.desc())


def title_key(title: str | None) -> str:
    """Normalized title used for duplicate detection."""
    return (title or "").strip().lower()


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def list_products(db: AsyncSession) -> Sequence[Product]:
    result = await db.execute(_newest_first(select(Product)))
    return result.scalars().all()


async def count_products(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Product.id)))
    return result.scalar() or 0


async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    return await db.get(Product, product_id)


async def insert_product(db: AsyncSession, **fields: Any) -> Product:
    """Insert a product and return it with its generated id."""
    product = Product(**{k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info(f"Added product {product.id}: '{product.title}' ({product.platform})")
    return product


async def update_product(db: AsyncSession, product: Product, **fields: Any) -> Product:
    """Apply the given column values to ``product`` and commit."""
    for key, value in fields.items():
        if key in EDITABLE_FIELDS:
            setattr(product, key, value)
    await db.commit()
    await db.refresh(product)
    return product


async def delete_product(db: AsyncSession, product_id: int) -> None:
    await db.execute(delete(Product).where(Product.id == product_id))
    await db.commit()


async def list_categories(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(Product.category)
        .where(Product.category != "")
        .distinct()
        .order_by(Product.category)
    )
    return list(result.scalars().all())


async def list_by_category(db: AsyncSession, category: str) -> Sequence[Product]:
    result = await db.execute(
        _newest_first(select(Product).where(Product.category == category))
    )
    return result.scalars().all()


async def search_products(db: AsyncSession, term: str) -> Sequence[Product]:
    """Case-insensitive substring match on title, description or category."""
    pattern = _like_pattern(term)
    result = await db.execute(
        _newest_first(
            select(Product).where(
                or_(
                    Product.title.ilike(pattern, escape="\\"),
                    Product.description.ilike(pattern, escape="\\"),
                    Product.category.ilike(pattern, escape="\\"),
                )
            )
        )
    )
    return result.scalars().all()


async def list_new_arrivals(db: AsyncSession) -> Sequence[Product]:
    result = await db.execute(_newest_first(select(Product).where(Product.is_new.is_(True))))
    return result.scalars().all()


async def list_bestsellers(db: AsyncSession) -> Sequence[Product]:
    result = await db.execute(
        _newest_first(select(Product).where(Product.is_bestseller.is_(True)))
    )
    return result.scalars().all()


async def existing_title_keys(db: AsyncSession) -> set[str]:
    result = await db.execute(select(Product.title))
    return {title_key(title) for title in result.scalars().all()}


def featured_products(
    bestsellers: Iterable[Product],
    new_arrivals: Iterable[Product],
    recent: Iterable[Product],
    limit: int = 5,
) -> list[Product]:
    """
    Build the home-page carousel.

    Bestsellers come first, then new arrivals, then the most recent products
    as padding. Each product appears once and at most ``limit`` are returned.
    """
    seen: set[int] = set()
    featured: list[Product] = []

    for product in list(bestsellers) + list(new_arrivals):
        if product.id not in seen:
            seen.add(product.id)
            featured.append(product)

    for product in recent:
        if len(featured) >= limit:
            break
        if product.id not in seen:
            seen.add(product.id)
            featured.append(product)

    return featured[:limit]


def group_by_category(products: Iterable[Product]) -> "OrderedDict[str, list[Product]]":
    """Group products by category in first-seen order."""
    grouped: OrderedDict[str, list[Product]] = OrderedDict()
    for product in products:
        grouped.setdefault(product.category or OTHER_CATEGORY, []).append(product)
    return grouped


def related_products(product: Product, candidates: Iterable[Product], limit: int = 4) -> list[Product]:
    """Other products from the same category, up to ``limit``."""
    related = [p for p in candidates if p.id != product.id]
    return related[:limit]


def sort_products(products: Sequence[Product], sort: str | None) -> list[Product]:
    """Order category listings; unknown sort keys keep the newest-first order."""
    items = list(products)
    if sort == "price-asc":
        items.sort(key=lambda p: parse_price(p.price))
    elif sort == "price-desc":
        items.sort(key=lambda p: parse_price(p.price), reverse=True)
    elif sort == "bestseller":
        items.sort(key=lambda p: not p.is_bestseller)
    return items
