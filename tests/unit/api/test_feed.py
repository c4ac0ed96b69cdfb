"""Unit tests for feed endpoints."""

import csv
import io

from fastapi.testclient import TestClient

from conftest import FakeShopify

FEED = [
    {
        "id": 1,
        "title": "Mug",
        "body_html": "",
        "variants": [{"price": "9.99"}],
        "images": [{"src": "https://cdn.example.com/mug.png"}],
    },
    {"id": 2, "title": "Poster", "variants": [{"price": "12.00"}], "images": []},
]


def test_read_feed(client: TestClient, fake_shopify: FakeShopify) -> None:
    fake_shopify.feed_pages = [FEED]

    response = client.get("/api/feed", params={"url": "https://shop.example.com"})
    assert response.status_code == 200

    products = response.json()["products"]
    assert products[0] == {
        "id": "1",
        "title": "Mug",
        "price": 9.99,
        "description": "",
        "image": "https://cdn.example.com/mug.png",
    }
    assert products[1]["image"] == ""


def test_read_feed_unavailable(client: TestClient, fake_shopify: FakeShopify) -> None:
    fake_shopify.feed_status = 404

    response = client.get("/api/feed", params={"url": "https://shop.example.com"})
    assert response.status_code == 502
    assert response.json() == {
        "error": "Unable to fetch products. Please check the URL and try again."
    }


def test_read_feed_malformed_url(client: TestClient, fake_shopify: FakeShopify) -> None:
    for path in ("/api/feed", "/api/feed/export.csv"):
        response = client.get(path, params={"url": "http://[::1"})
        assert response.status_code == 502
        assert response.json() == {
            "error": "Unable to fetch products. Please check the URL and try again."
        }
    assert fake_shopify.requests == []


def test_read_feed_skips_non_object_entries(client: TestClient, fake_shopify: FakeShopify) -> None:
    fake_shopify.feed_pages = [[1, "junk", *FEED]]

    response = client.get("/api/feed", params={"url": "https://shop.example.com"})
    assert response.status_code == 200
    assert [p["title"] for p in response.json()["products"]] == ["Mug", "Poster"]


def test_read_feed_requires_url(client: TestClient) -> None:
    response = client.get("/api/feed")
    assert response.status_code == 422


def test_export_csv(client: TestClient, fake_shopify: FakeShopify) -> None:
    fake_shopify.feed_pages = [FEED]

    response = client.get("/api/feed/export.csv", params={"url": "https://shop.example.com"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "shopify_products.csv" in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert len(rows) == 3
    assert rows[1][0] == "mug"
    assert rows[2][9] == "12.00"
