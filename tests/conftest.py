"""Pytest configuration and fixtures."""

import asyncio
import json
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from storefront_sync.api.dependencies import get_sync_config
from storefront_sync.config import Settings, get_settings
from storefront_sync.infrastructure.http import get_http_client
from storefront_sync.main import create_app
from storefront_sync.services.product_sync import SyncConfig
from storefront_sync.services.retry import linear_backoff

IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
UNREACHABLE_HOST = "unreachable.invalid"


class FakeShopify:
    """In-memory stand-in for the Admin API, image hosts and storefront feeds.

    Behaviour is keyed by product title so a single transport can serve a
    whole batch with mixed outcomes.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.next_id = 1001
        self.connect_failures: dict[str, int] = {}
        self.user_errors: set[str] = set()
        self.delays: dict[str, float] = {}
        self.html_response = False
        self.image_status = 200
        self.feed_pages: list[list[dict[str, Any]]] = []
        self.feed_status = 200

    # -- request views -----------------------------------------------------

    @property
    def graphql_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/graphql.json")]

    @property
    def image_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/images.json")]

    def graphql_titles(self) -> list[str]:
        return [
            json.loads(r.content)["variables"]["input"]["title"]
            for r in self.graphql_requests
        ]

    # -- handler -------------------------------------------------------------

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/graphql.json"):
            return await self._product_create(request)
        if path.endswith("/images.json"):
            return httpx.Response(self.image_status, json={"image": {"id": 1}})
        if path.endswith("/products.json"):
            return self._feed(request)
        if request.url.host == UNREACHABLE_HOST:
            raise httpx.ConnectError("name resolution failed", request=request)
        return httpx.Response(200, content=IMAGE_BYTES, headers={"content-type": "image/png"})

    async def _product_create(self, request: httpx.Request) -> httpx.Response:
        product_input = json.loads(request.content)["variables"]["input"]
        title = product_input["title"]

        if title in self.delays:
            await asyncio.sleep(self.delays[title])
        if self.html_response:
            return httpx.Response(
                401, text="<html>Unauthorized</html>", headers={"content-type": "text/html"}
            )
        if self.connect_failures.get(title, 0) > 0:
            self.connect_failures[title] -= 1
            raise httpx.ConnectError("connection reset", request=request)
        if title in self.user_errors:
            return httpx.Response(
                200,
                json={
                    "data": {
                        "productCreate": {
                            "product": None,
                            "userErrors": [{"field": ["title"], "message": "Title is invalid"}],
                        }
                    }
                },
            )

        product_id = self.next_id
        self.next_id += 1
        price = product_input["variants"][0]["price"]
        return httpx.Response(
            200,
            json={
                "data": {
                    "productCreate": {
                        "product": {
                            "id": f"gid://shopify/Product/{product_id}",
                            "title": title,
                            "variants": {
                                "edges": [
                                    {
                                        "node": {
                                            "id": f"gid://shopify/ProductVariant/{product_id}1",
                                            "price": price,
                                        }
                                    }
                                ]
                            },
                        },
                        "userErrors": [],
                    }
                }
            },
        )

    def _feed(self, request: httpx.Request) -> httpx.Response:
        if self.feed_status != 200:
            return httpx.Response(self.feed_status, text="Not Found")
        page = int(request.url.params.get("page", "1"))
        products = self.feed_pages[page - 1] if page <= len(self.feed_pages) else []
        return httpx.Response(200, json={"products": products})


class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def fake_shopify() -> FakeShopify:
    return FakeShopify()


@pytest_asyncio.fixture
async def http_client(fake_shopify: FakeShopify) -> AsyncGenerator[httpx.AsyncClient, None]:
    """AsyncClient whose every request is answered by FakeShopify."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_shopify)) as client:
        yield client


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def sync_config() -> SyncConfig:
    """Observed production policy: chunks of 5, 3 attempts, 1s linear backoff."""
    return SyncConfig(
        batch_size=5,
        max_attempts=3,
        backoff=linear_backoff(1.0),
        stagger_delay=0.1,
        chunk_pause=1.0,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(app_env="test", debug=True)


@pytest.fixture
def app(test_settings: Settings, fake_shopify: FakeShopify) -> Generator[Any, None, None]:
    """Create test application with outbound HTTP served by FakeShopify."""
    test_http = httpx.AsyncClient(transport=httpx.MockTransport(fake_shopify))

    def get_test_settings() -> Settings:
        return test_settings

    def get_test_http_client() -> httpx.AsyncClient:
        return test_http

    def get_test_sync_config() -> SyncConfig:
        return SyncConfig(
            batch_size=2,
            max_attempts=3,
            backoff=linear_backoff(0.0),
            stagger_delay=0.0,
            chunk_pause=0.0,
        )

    app = create_app()
    app.dependency_overrides[get_settings] = get_test_settings
    app.dependency_overrides[get_http_client] = get_test_http_client
    app.dependency_overrides[get_sync_config] = get_test_sync_config
    yield app

    asyncio.run(test_http.aclose())


@pytest.fixture
def client(app: Any) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)


@pytest.fixture
def shop_url() -> str:
    return "https://Test-Store.myshopify.com/"


@pytest.fixture
def sample_products() -> list[dict[str, Any]]:
    """Sample product records as sent by the UI."""
    return [
        {"id": "1", "title": "Mug", "price": 9.99, "image": "http://x/mug.png"},
        {"id": "2", "title": "Poster", "price": "12.5", "description": "<p>A3</p>"},
        {"id": "3", "title": "Sticker Pack", "price": 3, "image": ""},
    ]
