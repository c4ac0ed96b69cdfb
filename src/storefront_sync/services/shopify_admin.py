"""Shopify Admin API client.

Creates products through the GraphQL ``productCreate`` mutation and attaches
images through the REST images endpoint, since the mutation has no way to
upload raw bytes.
"""

import base64
import re
from typing import Any

import httpx
import structlog

from storefront_sync.constants import (
    DEFAULT_API_VERSION,
    IMAGE_FILENAME_EXTENSION,
    PRODUCT_CREATE_MUTATION,
    PRODUCT_STATUS,
    SHOPIFY_ACCESS_TOKEN_HEADER,
    VARIANT_DEFAULTS,
)
from storefront_sync.errors import (
    ImageAttachError,
    NetworkError,
    RemoteValidationError,
    TransportError,
)
from storefront_sync.models import CreatedProduct, ProductRecord, SyncCredential

logger = structlog.get_logger()

_SLUG_RE = re.compile(r"[^a-z0-9]")


def image_filename(title: str) -> str:
    """Filename for an attached image: every non [a-z0-9] char becomes '-'."""
    return _SLUG_RE.sub("-", title.lower()) + IMAGE_FILENAME_EXTENSION


def build_product_input(record: ProductRecord) -> dict[str, Any]:
    """ProductInput variables for a product with a single default variant."""
    return {
        "title": record.title,
        "descriptionHtml": record.description or "",
        "variants": [{"price": record.price_text, **VARIANT_DEFAULTS}],
        "status": PRODUCT_STATUS,
        "published": True,
    }


class ShopifyAdminClient:
    """Thin wrapper over the Admin API endpoints the sync pipeline needs."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        credential: SyncCredential,
        api_version: str = DEFAULT_API_VERSION,
    ):
        self.http = http
        self.credential = credential
        self.api_version = api_version

    @property
    def base_url(self) -> str:
        return f"https://{self.credential.shop_domain}/admin/api/{self.api_version}"

    @property
    def graphql_url(self) -> str:
        return f"{self.base_url}/graphql.json"

    def images_url(self, numeric_id: str) -> str:
        return f"{self.base_url}/products/{numeric_id}/images.json"

    def _headers(self) -> dict[str, str]:
        return {
            SHOPIFY_ACCESS_TOKEN_HEADER: self.credential.access_token,
            "Content-Type": "application/json",
        }

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await self.http.post(url, json=payload, headers=self._headers())
        except httpx.TransportError as e:
            raise NetworkError(
                f"Request to {self.credential.shop_domain} failed: {e!r}"
            ) from e

    # -------------------------------------------------------------------------
    # Product creation
    # -------------------------------------------------------------------------

    async def create_product(self, record: ProductRecord) -> CreatedProduct:
        """
        Create one product with one default variant.

        Not idempotent: calling twice with the same record creates two
        remote products.

        Raises:
            NetworkError: Connection failure or timeout.
            TransportError: Response is not JSON (bad domain or token).
            RemoteValidationError: Response carries errors or userErrors.
        """
        response = await self._post(
            self.graphql_url,
            {
                "query": PRODUCT_CREATE_MUTATION,
                "variables": {"input": build_product_input(record)},
            },
        )

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise TransportError("Invalid shop URL or access token")
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError("Invalid shop URL or access token") from e

        if body.get("errors"):
            raise RemoteValidationError(body["errors"])

        result = (body.get("data") or {}).get("productCreate") or {}
        if result.get("userErrors"):
            raise RemoteValidationError(result["userErrors"])

        product = result.get("product")
        if not product or not product.get("id"):
            raise RemoteValidationError(body)

        edges = (product.get("variants") or {}).get("edges") or []
        variant = edges[0]["node"] if edges else {}

        return CreatedProduct(
            remote_id=product["id"],
            title=product.get("title", record.title),
            price=variant.get("price"),
            variant_id=variant.get("id"),
        )

    # -------------------------------------------------------------------------
    # Image attachment
    # -------------------------------------------------------------------------

    async def download_image(self, image_url: str) -> str:
        """Fetch raw image bytes and return them base64-encoded."""
        try:
            response = await self.http.get(image_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ImageAttachError(
                f"Image download failed: {e!r}", stage="download", image_url=image_url
            ) from e
        return base64.b64encode(response.content).decode("ascii")

    async def attach_image(
        self, product: CreatedProduct, title: str, image_url: str
    ) -> dict[str, Any]:
        """
        Download ``image_url`` and attach it to an existing product.

        Raises:
            ImageAttachError: Download or attach call failed.
        """
        attachment = await self.download_image(image_url)
        payload = {
            "image": {
                "attachment": attachment,
                "filename": image_filename(title),
            }
        }

        try:
            response = await self._post(self.images_url(product.numeric_id), payload)
        except NetworkError as e:
            raise ImageAttachError(str(e), stage="attach", image_url=image_url) from e

        if not response.is_success:
            raise ImageAttachError(
                f"Image attach failed with status {response.status_code}: "
                f"{response.text[:200]}",
                stage="attach",
                image_url=image_url,
            )

        logger.debug(
            "Image attached",
            remote_id=product.remote_id,
            filename=payload["image"]["filename"],
        )
        try:
            return response.json()
        except ValueError:
            return {}
