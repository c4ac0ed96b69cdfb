#!/usr/bin/env python3
"""CLI script to copy products from a storefront feed into a Shopify store."""

import argparse
import asyncio
import os
import sys

import structlog

from storefront_sync.config import get_settings
from storefront_sync.errors import FeedUnavailable, InvalidDomain
from storefront_sync.infrastructure.http import build_http_client
from storefront_sync.models import SyncEvent, SyncEventKind
from storefront_sync.services.feed_reader import StorefrontFeedReader
from storefront_sync.services.product_sync import ProductSyncPipeline, SyncConfig

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("feed_url", help="Source storefront URL (or its products.json)")
    parser.add_argument("shop_url", help="Target store, e.g. my-store.myshopify.com")
    parser.add_argument(
        "--token",
        default=os.environ.get("SHOPIFY_ACCESS_TOKEN", ""),
        help="Admin API access token (default: $SHOPIFY_ACCESS_TOKEN)",
    )
    parser.add_argument(
        "--ids",
        nargs="*",
        default=None,
        help="Only sync products with these feed ids",
    )
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--dry-run", action="store_true", help="List products without syncing")
    return parser.parse_args(argv)


def print_event(event: SyncEvent) -> None:
    if event.kind is SyncEventKind.CHUNK_COMPLETED:
        print(f"  {event.data['progress']}% complete ({event.data['succeeded']} created)")
    elif event.kind is SyncEventKind.IMAGE_ATTACH_FAILED:
        print(f"  warning: {event.message}")


async def main(argv: list[str] | None = None) -> int:
    """Main sync function."""
    args = parse_args(argv)
    settings = get_settings()
    if args.batch_size:
        settings = settings.model_copy(update={"sync_batch_size": args.batch_size})

    async with build_http_client(settings) as http:
        reader = StorefrontFeedReader(
            http,
            page_limit=settings.feed_page_limit,
            max_pages=settings.feed_max_pages,
        )
        products = await reader.fetch_products(args.feed_url)
        if args.ids is not None:
            wanted = set(args.ids)
            products = [p for p in products if p.id in wanted]
        logger.info("Products selected", count=len(products))

        if args.dry_run:
            for product in products:
                print(f"{product.id}\t{product.price_text}\t{product.title}")
            return 0

        if not args.token:
            print("An access token is required (--token or SHOPIFY_ACCESS_TOKEN)", file=sys.stderr)
            return 2

        pipeline = ProductSyncPipeline(
            http, SyncConfig.from_settings(settings), listener=print_event
        )
        summary = await pipeline.run(products, args.shop_url, args.token)

    print(f"{summary.succeeded} of {summary.total} products synced")
    for result in summary.results:
        if not result.ok:
            print(f"  failed: {result.title or result.index}: {result.error}")
    return 0 if summary.failed == 0 else 1


def cli() -> int:
    try:
        return asyncio.run(main())
    except (FeedUnavailable, InvalidDomain) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(cli())
