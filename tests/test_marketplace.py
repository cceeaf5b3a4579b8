"""Tests for store-page parsing and embedded JSON extraction."""

import json

import pytest

from storefront.catalog.categories import FASHION_CLOTHING, NAILS_BEAUTY
from storefront.config import settings
from storefront.ingest.http_client import BlockedError
from storefront.ingest.json_extractor import extract_next_data, find_next_data_script, navigate_json
from storefront.ingest.marketplace import (
    MarketplaceParseError,
    MarketplaceProduct,
    fetch_store_products,
    normalize_store_url,
    parse_product,
    parse_store_page,
    to_product_fields,
)

RAW_HOODIE = {
    "id": 101,
    "name": "  Oversized Hoodie  ",
    "slug": "oversized-hoodie",
    "original_slug": "4abc",
    "min_product_price": 399,
    "min_catalog_price": 599,
    "description": "",
    "image": "https://images.meesho.com/images/products/101/main.jpg",
    "images": ["https://images.meesho.com/images/products/101/1.jpg", 7],
    "sub_sub_category_name": "Sweatshirts",
    "supplier_reviews_summary": {"average_rating_str": "4.1", "rating_count": 52},
}

RAW_NAILS = {
    "id": 102,
    "name": "Press On Nails",
    "slug": "press-on-nails",
    "min_product_price": 149,
    "min_catalog_price": 149,
    "product_images": [{"url": "https://images.meesho.com/images/products/102/1.jpg"}, {"alt": "x"}],
    "sub_sub_category_name": "Nail Art",
}


def store_page(initial_state: dict) -> str:
    data = {"props": {"pageProps": {"initialState": initial_state}}}
    return (
        "<html><body>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>'
        "</body></html>"
    )


def listing(products: list, count: int = 0) -> dict:
    return {"listing": {"productsCount": count, "products": [{"products": products}]}}


class TestJsonExtractor:
    def test_find_script(self):
        html = store_page({"a": 1})
        assert json.loads(find_next_data_script(html))["props"]["pageProps"]["initialState"] == {"a": 1}

    def test_missing_script(self):
        assert find_next_data_script("<html><body>hi</body></html>") is None
        assert extract_next_data("<html></html>") is None

    def test_invalid_json(self):
        html = '<script id="__NEXT_DATA__">{not json</script>'
        assert extract_next_data(html) is None

    def test_navigate(self):
        data = {"a": {"b": {"c": 3}}}
        assert navigate_json(data, "a", "b", "c") == 3

    def test_navigate_missing_key(self):
        with pytest.raises(KeyError, match="key x not found"):
            navigate_json({"a": {}}, "a", "x")

    def test_navigate_non_mapping(self):
        with pytest.raises(KeyError, match="expected map at key b"):
            navigate_json({"a": [1, 2]}, "a", "b")


class TestParseProduct:
    def test_full_entry(self):
        mp = parse_product(RAW_HOODIE)

        assert mp.meesho_id == 101
        assert mp.name == "Oversized Hoodie"
        assert mp.price == 399
        assert mp.catalog_price == 599
        assert mp.description == "Oversized Hoodie"
        assert mp.images == ["https://images.meesho.com/images/products/101/1.jpg"]
        assert mp.rating == "4.1"
        assert mp.rating_count == 52
        assert mp.url == "https://www.meesho.com/oversized-hoodie/p/4abc"

    def test_product_images_fallback(self):
        mp = parse_product(RAW_NAILS)

        assert mp.images == ["https://images.meesho.com/images/products/102/1.jpg"]
        assert mp.url == "https://www.meesho.com/press-on-nails"
        assert mp.rating == ""

    def test_mistyped_fields_ignored(self):
        mp = parse_product({"id": True, "name": 5, "min_product_price": "399"})

        assert mp.meesho_id == 0
        assert mp.name == ""
        assert mp.price == 0
        assert mp.url == ""


class TestParseStorePage:
    def test_shop_listing(self):
        html = store_page({"shopListing": listing([RAW_HOODIE, RAW_NAILS], count=40)})

        products, total = parse_store_page(html)

        assert total == 40
        assert [p.meesho_id for p in products] == [101, 102]

    def test_home_listing_fallback(self):
        html = store_page({"hpListing": listing([RAW_NAILS])})

        products, total = parse_store_page(html)

        assert len(products) == 1
        assert total == 0

    def test_access_denied(self):
        with pytest.raises(BlockedError):
            parse_store_page("<html><h1>Access Denied</h1></html>")

    def test_no_next_data(self):
        with pytest.raises(MarketplaceParseError, match="could not find product data"):
            parse_store_page("<html><body>nothing</body></html>")

    def test_bad_json(self):
        with pytest.raises(MarketplaceParseError, match="failed to parse page data"):
            parse_store_page('<script id="__NEXT_DATA__">{oops</script>')

    def test_no_listing(self):
        with pytest.raises(MarketplaceParseError, match="could not find listing data"):
            parse_store_page(store_page({"somethingElse": {}}))

    def test_listing_not_a_map(self):
        with pytest.raises(MarketplaceParseError, match="unexpected listing format"):
            parse_store_page(store_page({"shopListing": {"listing": []}}))

    def test_empty_listing(self):
        with pytest.raises(MarketplaceParseError, match="no products found"):
            parse_store_page(store_page({"shopListing": {"listing": {"productsCount": 0, "products": []}}}))


class TestStoreUrl:
    def test_default(self):
        assert normalize_store_url("") == settings.marketplace_store_url
        assert normalize_store_url(None) == settings.marketplace_store_url

    def test_bare_name(self):
        assert normalize_store_url("SomeShop") == "https://www.meesho.com/SomeShop"

    def test_full_url(self):
        assert normalize_store_url(" https://www.meesho.com/Other ") == "https://www.meesho.com/Other"


class TestFetchStoreProducts:
    @pytest.mark.asyncio
    async def test_fetch_uses_mobile_agent(self, upstream, outbound):
        url = "https://www.meesho.com/SomeShop"
        upstream.add(url, text=store_page({"shopListing": listing([RAW_HOODIE], count=1)}))

        products, total = await fetch_store_products(outbound, url)

        assert total == 1
        assert products[0].name == "Oversized Hoodie"
        assert "Mobile" in upstream.requests[0].headers["user-agent"]

    @pytest.mark.asyncio
    async def test_blocked(self, upstream, outbound):
        url = "https://www.meesho.com/Blocked"
        upstream.add(url, status=403, text="Forbidden")

        with pytest.raises(BlockedError, match="Try again in a few minutes"):
            await fetch_store_products(outbound, url)


class TestToProductFields:
    def test_discounted_product(self):
        fields = to_product_fields(parse_product(RAW_HOODIE))

        assert fields["platform"] == "Meesho"
        assert fields["title"] == "Oversized Hoodie"
        assert fields["price"] == "₹399"
        assert fields["original_price"] == "₹599"
        assert fields["image_url"] == RAW_HOODIE["image"]
        assert fields["category"] == FASHION_CLOTHING
        assert json.loads(fields["images"]) == ["https://images.meesho.com/images/products/101/1.jpg"]

    def test_undiscounted_product_uses_first_image(self):
        fields = to_product_fields(parse_product(RAW_NAILS))

        assert fields["original_price"] == ""
        assert fields["image_url"] == "https://images.meesho.com/images/products/102/1.jpg"
        assert fields["category"] == NAILS_BEAUTY

    def test_model_accepts_partial_json(self):
        mp = MarketplaceProduct.model_validate({"meesho_id": 5, "name": "Mug", "price": 99})
        assert to_product_fields(mp)["images"] == "[]"
