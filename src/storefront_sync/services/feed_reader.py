"""Storefront feed reader.

Reads a store's public ``products.json`` listing and flattens it into
product records.
"""

from typing import Any

import httpx
import structlog

from storefront_sync.constants import FEED_PATH
from storefront_sync.errors import FeedUnavailable
from storefront_sync.models import ProductRecord

logger = structlog.get_logger()


def feed_url(store_url: str) -> str:
    """Append ``/products.json`` to a storefront URL unless already present."""
    url = store_url.strip()
    if url.endswith(f"/{FEED_PATH}"):
        return url
    return f"{url}{FEED_PATH}" if url.endswith("/") else f"{url}/{FEED_PATH}"


def _first(items: Any, key: str) -> Any:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get(key)
    return None


def normalize_feed_product(raw: Any) -> ProductRecord:
    """
    Flatten one feed product: first variant's price, first image's src.

    Raises:
        ValueError: The entry is not an object or fails record validation.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Feed product is not an object: {raw!r}")
    return ProductRecord(
        id=raw.get("id"),
        title=raw.get("title") or "",
        price=_first(raw.get("variants"), "price") or "0",
        description=raw.get("body_html") or "",
        image=_first(raw.get("images"), "src") or "",
    )


class StorefrontFeedReader:
    """Fetches and normalizes a storefront's public product listing."""

    def __init__(self, http: httpx.AsyncClient, page_limit: int = 250, max_pages: int = 1):
        self.http = http
        self.page_limit = page_limit
        self.max_pages = max(1, max_pages)

    async def _fetch_page(self, url: str, page: int) -> list[dict[str, Any]]:
        params = {"limit": self.page_limit, "page": page}
        try:
            response = await self.http.get(url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Feed request failed", url=url, page=page, error=repr(e))
            raise FeedUnavailable() from e

        if not response.is_success:
            logger.warning("Feed returned error status", url=url, status=response.status_code)
            raise FeedUnavailable()

        try:
            payload = response.json()
        except ValueError as e:
            raise FeedUnavailable() from e

        products = payload.get("products") if isinstance(payload, dict) else None
        if not isinstance(products, list):
            raise FeedUnavailable()
        return products

    async def fetch_products(self, store_url: str) -> list[ProductRecord]:
        """
        Fetch up to ``max_pages`` pages of the feed.

        Products that cannot be normalized (no title, not an object) are
        skipped and logged; they never reach the sync pipeline.

        Raises:
            FeedUnavailable: Malformed URL, network failure, non-2xx status
                or malformed JSON.
        """
        url = feed_url(store_url)
        records: list[ProductRecord] = []

        for page in range(1, self.max_pages + 1):
            raw_products = await self._fetch_page(url, page)
            for raw in raw_products:
                try:
                    records.append(normalize_feed_product(raw))
                except ValueError as e:
                    product_id = raw.get("id") if isinstance(raw, dict) else None
                    logger.warning("Skipping unusable feed product", product_id=product_id, error=str(e))
            if len(raw_products) < self.page_limit:
                break

        logger.info("Feed fetched", url=url, products=len(records))
        return records
