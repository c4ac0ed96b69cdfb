"""Business logic services."""

from storefront_sync.services.feed_reader import StorefrontFeedReader
from storefront_sync.services.product_sync import ProductSyncPipeline, SyncConfig
from storefront_sync.services.retry import retry_with_backoff
from storefront_sync.services.shop_domain import normalize_shop_domain
from storefront_sync.services.shopify_admin import ShopifyAdminClient

__all__ = [
    "ProductSyncPipeline",
    "ShopifyAdminClient",
    "StorefrontFeedReader",
    "SyncConfig",
    "normalize_shop_domain",
    "retry_with_backoff",
]
