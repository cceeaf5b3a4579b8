"""Tests for the product management API."""

from pathlib import Path

import pytest

from storefront.config import settings

PAGE = """
<html><head>
<meta property="og:title" content="Stainless Steel Bottle | Amazon.in">
<meta property="og:image" content="https://m.media-amazon.com/images/I/bottle.jpg">
<meta property="og:description" content="1 litre, leak proof">
</head><body><span>₹ 349</span> 4.4 out of 5</body></html>
"""


async def add_manual(client, **fields):
    data = {"mode": "manual", "title": "Moon Lamp", "price": "₹499"}
    data.update(fields)
    resp = await client.post("/api/add", data=data)
    assert resp.status_code == 200, resp.text
    return resp.json()["product"]


class TestAddProduct:
    @pytest.mark.asyncio
    async def test_manual(self, client):
        product = await add_manual(client, url="https://www.flipkart.com/lamp/p/1", category="Home & Decor")

        assert product["title"] == "Moon Lamp"
        assert product["platform"] == "Flipkart"
        assert product["category"] == "Home & Decor"
        assert product["is_new"] is False

    @pytest.mark.asyncio
    async def test_manual_requires_title(self, client):
        resp = await client.post("/api/add", data={"mode": "manual", "title": ""})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Title is required"}

    @pytest.mark.asyncio
    async def test_scrape_mode(self, client, upstream):
        url = "https://www.amazon.in/dp/B0BOTTLE"
        upstream.add(url, text=PAGE, headers={"content-type": "text/html"})

        resp = await client.post("/api/add", data={"url": url})

        assert resp.status_code == 200
        product = resp.json()["product"]
        assert product["title"] == "Stainless Steel Bottle"
        assert product["platform"] == "Amazon"
        assert product["price"] == "₹349"
        assert product["rating"] == "4.4"
        assert product["category"] == "Kitchen & Dining"

    @pytest.mark.asyncio
    async def test_scrape_requires_url(self, client):
        resp = await client.post("/api/add", data={"url": ""})
        assert resp.status_code == 400
        assert resp.json()["error"] == "URL is required"

    @pytest.mark.asyncio
    async def test_scrape_failure(self, client, upstream):
        url = "https://www.meesho.com/blocked/p/1"
        upstream.add(url, status=403, text="Access Denied")

        resp = await client.post("/api/add", data={"url": url})

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Failed to scrape: fetch page")


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_list_and_get(self, client):
        first = await add_manual(client, title="First")
        second = await add_manual(client, title="Second")

        listed = (await client.get("/api/products")).json()
        assert [p["id"] for p in listed] == [second["id"], first["id"]]

        resp = await client.get(f"/api/product/{first['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "First"

    @pytest.mark.asyncio
    async def test_get_errors(self, client):
        resp = await client.get("/api/product/abc")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid ID"}

        resp = await client.get("/api/product/99999999999999999999")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid ID"}

        resp = await client.post("/api/delete/99999999999999999999")
        assert resp.status_code == 400

        resp = await client.get("/api/product/999")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Product not found"}

    @pytest.mark.asyncio
    async def test_update_keeps_empty_fields(self, client):
        product = await add_manual(client, description="Warm light")

        resp = await client.post(
            f"/api/update/{product['id']}",
            data={"title": "", "price": "₹449", "is_new": "1", "is_bestseller": "0"},
        )

        assert resp.status_code == 200
        updated = resp.json()["product"]
        assert updated["title"] == "Moon Lamp"
        assert updated["description"] == "Warm light"
        assert updated["price"] == "₹449"
        assert updated["is_new"] is True
        assert updated["is_bestseller"] is False

    @pytest.mark.asyncio
    async def test_update_nonzero_flag_is_true(self, client):
        product = await add_manual(client)

        resp = await client.post(
            f"/api/update/{product['id']}", data={"is_new": "2", "is_bestseller": "-1"}
        )

        updated = resp.json()["product"]
        assert updated["is_new"] is True
        assert updated["is_bestseller"] is True

    @pytest.mark.asyncio
    async def test_update_missing(self, client):
        resp = await client.post("/api/update/999", data={"title": "x"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, client):
        product = await add_manual(client)

        resp = await client.post(f"/api/delete/{product['id']}")
        assert resp.json() == {"ok": True}
        assert (await client.get(f"/api/product/{product['id']}")).status_code == 404


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_image(self, client):
        resp = await client.post(
            "/api/upload",
            files={"file": ("photo.PNG", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        )

        assert resp.status_code == 200
        url = resp.json()["url"]
        name = url.rsplit("/", 1)[1]
        assert url.startswith("/uploads/")
        assert name.endswith(".png")
        assert len(name) == len("0" * 24 + ".png")
        assert (Path(settings.uploads_dir) / name).read_bytes() == b"\x89PNG\r\n\x1a\nfake"

        served = await client.get(url)
        assert served.status_code == 200

    @pytest.mark.asyncio
    async def test_rejects_extension(self, client):
        resp = await client.post("/api/upload", files={"file": ("notes.txt", b"hi", "text/plain")})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Only jpg, png, gif, webp allowed"

    @pytest.mark.asyncio
    async def test_missing_file(self, client):
        resp = await client.post("/api/upload", data={"other": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "No file uploaded"

    @pytest.mark.asyncio
    async def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "upload_max_bytes", 10)

        resp = await client.post("/api/upload", files={"file": ("big.jpg", b"x" * 100, "image/jpeg")})

        assert resp.status_code == 413
