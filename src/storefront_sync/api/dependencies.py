"""FastAPI dependencies."""

import httpx
from fastapi import Depends

from storefront_sync.config import Settings, get_settings
from storefront_sync.infrastructure.http import get_http_client
from storefront_sync.services.feed_reader import StorefrontFeedReader
from storefront_sync.services.product_sync import ProductSyncPipeline, SyncConfig


def get_sync_config(settings: Settings = Depends(get_settings)) -> SyncConfig:
    return SyncConfig.from_settings(settings)


def get_sync_pipeline(
    http: httpx.AsyncClient = Depends(get_http_client),
    config: SyncConfig = Depends(get_sync_config),
) -> ProductSyncPipeline:
    return ProductSyncPipeline(http, config)


def get_feed_reader(
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> StorefrontFeedReader:
    return StorefrontFeedReader(
        http,
        page_limit=settings.feed_page_limit,
        max_pages=settings.feed_max_pages,
    )
