"""Tests for catalog queries and listing helpers."""

import pytest

from storefront.catalog import repository
from storefront.db.models import Product


async def add(db, title, **fields):
    return await repository.insert_product(db, url=f"https://example.com/{title}", title=title, **fields)


class TestQueries:
    @pytest.mark.asyncio
    async def test_insert_and_get(self, db_session):
        product = await add(db_session, "Moon Lamp", price="₹499", category="Home & Decor")

        assert product.id is not None
        assert product.platform == "Other"
        assert product.is_new is False

        fetched = await repository.get_product(db_session, product.id)
        assert fetched.title == "Moon Lamp"
        assert await repository.get_product(db_session, 9999) is None

    @pytest.mark.asyncio
    async def test_insert_ignores_unknown_fields(self, db_session):
        product = await add(db_session, "Mug", id=42, bogus="x")
        assert product.id != 42
        assert not hasattr(product, "bogus")

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session):
        old = await add(db_session, "Old")
        new = await add(db_session, "New")

        products = await repository.list_products(db_session)

        assert [p.id for p in products] == [new.id, old.id]
        assert await repository.count_products(db_session) == 2

    @pytest.mark.asyncio
    async def test_update_and_delete(self, db_session):
        product = await add(db_session, "Cap", price="₹199")

        await repository.update_product(db_session, product, price="₹149", is_bestseller=True)
        assert product.price == "₹149"
        assert product.is_bestseller is True

        await repository.delete_product(db_session, product.id)
        db_session.expire_all()
        assert await repository.get_product(db_session, product.id) is None

    @pytest.mark.asyncio
    async def test_categories(self, db_session):
        await add(db_session, "Lamp", category="Home & Decor")
        await add(db_session, "Vase", category="Home & Decor")
        await add(db_session, "Hoodie", category="Fashion & Clothing")
        await add(db_session, "Mystery")

        assert await repository.list_categories(db_session) == ["Fashion & Clothing", "Home & Decor"]
        decor = await repository.list_by_category(db_session, "Home & Decor")
        assert {p.title for p in decor} == {"Lamp", "Vase"}

    @pytest.mark.asyncio
    async def test_search(self, db_session):
        await add(db_session, "Steel Bottle", description="Keeps water cold")
        await add(db_session, "Moon Lamp", category="Home & Decor")
        await add(db_session, "100% Cotton Tee")

        assert [p.title for p in await repository.search_products(db_session, "bottle")] == ["Steel Bottle"]
        assert [p.title for p in await repository.search_products(db_session, "WATER")] == ["Steel Bottle"]
        assert [p.title for p in await repository.search_products(db_session, "decor")] == ["Moon Lamp"]
        assert [p.title for p in await repository.search_products(db_session, "100%")] == ["100% Cotton Tee"]
        assert await repository.search_products(db_session, "0%C") == []

    @pytest.mark.asyncio
    async def test_tags(self, db_session):
        await add(db_session, "Fresh", is_new=True)
        await add(db_session, "Popular", is_bestseller=True)
        await add(db_session, "Plain")

        assert [p.title for p in await repository.list_new_arrivals(db_session)] == ["Fresh"]
        assert [p.title for p in await repository.list_bestsellers(db_session)] == ["Popular"]

    @pytest.mark.asyncio
    async def test_existing_title_keys(self, db_session):
        await add(db_session, "  Moon Lamp ")
        assert await repository.existing_title_keys(db_session) == {"moon lamp"}


def make(pid, title="", price="", category="", is_new=False, is_bestseller=False):
    return Product(
        id=pid,
        title=title or f"P{pid}",
        price=price,
        category=category,
        is_new=is_new,
        is_bestseller=is_bestseller,
    )


class TestHelpers:
    def test_title_key(self):
        assert repository.title_key("  Moon LAMP ") == "moon lamp"
        assert repository.title_key(None) == ""

    def test_featured_order_and_dedup(self):
        best = [make(1), make(2)]
        new = [make(2), make(3)]
        recent = [make(4), make(1), make(5), make(6)]

        featured = repository.featured_products(best, new, recent)

        assert [p.id for p in featured] == [1, 2, 3, 4, 5]

    def test_featured_limit(self):
        best = [make(i) for i in range(1, 8)]
        assert len(repository.featured_products(best, [], [])) == 5

    def test_group_by_category(self):
        grouped = repository.group_by_category(
            [make(1, category="B"), make(2), make(3, category="A"), make(4, category="B")]
        )

        assert list(grouped.keys()) == ["B", "Other", "A"]
        assert [p.id for p in grouped["B"]] == [1, 4]

    def test_related_excludes_self(self):
        product = make(1, category="A")
        candidates = [make(i, category="A") for i in range(1, 8)]

        related = repository.related_products(product, candidates)

        assert [p.id for p in related] == [2, 3, 4, 5]

    def test_sort(self):
        items = [
            make(1, price="₹300"),
            make(2, price="Rs. 1,200", is_bestseller=True),
            make(3, price="₹50"),
        ]

        assert [p.id for p in repository.sort_products(items, "price-asc")] == [3, 1, 2]
        assert [p.id for p in repository.sort_products(items, "price-desc")] == [2, 1, 3]
        assert [p.id for p in repository.sort_products(items, "bestseller")] == [2, 1, 3]
        assert [p.id for p in repository.sort_products(items, "newest")] == [1, 2, 3]
        assert [p.id for p in repository.sort_products(items, "bogus")] == [1, 2, 3]
