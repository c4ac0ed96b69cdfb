"""Error taxonomy for feed reading and product sync."""

from typing import Any

import orjson


class ProductSyncError(Exception):
    """Base class for all sync errors."""


class InvalidDomain(ProductSyncError):
    """Shop URL does not resolve to a myshopify.com host. No request was made."""


class TransportError(ProductSyncError):
    """Admin API answered with something other than JSON.

    Wrong domains and bad tokens come back as HTML error pages, so this is
    surfaced to the user as a credentials problem.
    """


class RemoteValidationError(ProductSyncError):
    """Admin API rejected the mutation (top-level errors or userErrors)."""

    def __init__(self, payload: Any):
        self.payload = payload
        super().__init__(orjson.dumps(payload).decode())


class NetworkError(ProductSyncError):
    """Connection-level failure or timeout talking to a remote host."""


class ImageAttachError(ProductSyncError):
    """Image download or attach call failed. Never fails the parent product."""

    def __init__(self, message: str, *, stage: str, image_url: str):
        self.stage = stage
        self.image_url = image_url
        super().__init__(message)


class InvalidProductRecord(ProductSyncError):
    """A submitted product record failed local validation."""


class FeedUnavailable(ProductSyncError):
    """The storefront products.json feed could not be fetched or parsed."""

    default_message = "Unable to fetch products. Please check the URL and try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
