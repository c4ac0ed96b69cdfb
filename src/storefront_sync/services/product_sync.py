"""Product sync pipeline.

Pushes a list of product records into a Shopify store in fixed-size chunks.
Chunks run one after another; items inside a chunk run concurrently with a
staggered start so the Admin API rate limiter does not see a burst. Every
submitted record yields exactly one result, placed at its input index.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from storefront_sync.config import Settings
from storefront_sync.constants import DEFAULT_API_VERSION
from storefront_sync.errors import InvalidProductRecord
from storefront_sync.models import (
    ProductRecord,
    SyncCredential,
    SyncEvent,
    SyncEventKind,
    SyncResult,
    SyncSummary,
)
from storefront_sync.services.retry import (
    Backoff,
    exponential_backoff,
    linear_backoff,
    retry_with_backoff,
)
from storefront_sync.services.shop_domain import normalize_shop_domain
from storefront_sync.services.shopify_admin import ShopifyAdminClient

logger = structlog.get_logger()

EventListener = Callable[[SyncEvent], None]
AdminClientFactory = Callable[[SyncCredential], ShopifyAdminClient]


@dataclass(frozen=True)
class SyncConfig:
    """
    Batching, retry and pacing policy for one pipeline.

    Defaults: chunks of 5, 3 attempts per call with a linear 1s/2s backoff,
    100ms stagger between item starts inside a chunk, 1s pause between chunks.
    """

    batch_size: int = 5
    max_attempts: int = 3
    backoff: Backoff = field(default_factory=lambda: linear_backoff(1.0))
    retry_on: tuple[type[BaseException], ...] = (Exception,)
    stagger_delay: float = 0.1
    chunk_pause: float = 1.0
    api_version: str = DEFAULT_API_VERSION

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncConfig":
        base = settings.sync_retry_delay_ms / 1000
        if settings.sync_backoff == "exponential":
            backoff = exponential_backoff(base, settings.sync_backoff_cap_ms / 1000)
        else:
            backoff = linear_backoff(base)
        return cls(
            batch_size=settings.sync_batch_size,
            max_attempts=settings.sync_max_retries,
            backoff=backoff,
            stagger_delay=settings.sync_stagger_ms / 1000,
            chunk_pause=settings.sync_chunk_pause_ms / 1000,
            api_version=settings.shopify_api_version,
        )


def chunked(indices: Sequence[int], size: int) -> list[Sequence[int]]:
    """Split ``indices`` into consecutive slices of at most ``size``."""
    return [indices[start : start + size] for start in range(0, len(indices), size)]


class ProductSyncPipeline:
    """Creates products in a target store with retries, pacing and soft image failures."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        config: SyncConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        listener: EventListener | None = None,
        admin_client_factory: AdminClientFactory | None = None,
    ):
        self.http = http
        self.config = config or SyncConfig()
        self._sleep = sleep
        self._listener = listener
        self._client_factory = admin_client_factory or self._default_client

    def _default_client(self, credential: SyncCredential) -> ShopifyAdminClient:
        return ShopifyAdminClient(self.http, credential, api_version=self.config.api_version)

    def _emit(self, summary: SyncSummary, event: SyncEvent) -> None:
        summary.events.append(event)
        if self._listener is not None:
            self._listener(event)

    async def run(
        self,
        products: Sequence[Any],
        shop_url: str,
        access_token: str,
    ) -> SyncSummary:
        """
        Sync all ``products`` into the shop.

        Raises:
            InvalidDomain: Before any request, if the shop URL is not a
                myshopify.com host. This is the only error that aborts a run.
        """
        credential = SyncCredential(normalize_shop_domain(shop_url), access_token)
        client = self._client_factory(credential)

        total = len(products)
        log = logger.bind(shop_domain=credential.shop_domain, total=total)
        log.info("Starting product sync", batch_size=self.config.batch_size)

        summary = SyncSummary()
        slots: list[SyncResult | None] = [None] * total
        chunks = chunked(range(total), self.config.batch_size)
        processed = 0

        for chunk_number, indices in enumerate(chunks, start=1):
            self._emit(
                summary,
                SyncEvent(
                    SyncEventKind.CHUNK_STARTED,
                    f"Chunk {chunk_number}/{len(chunks)} started",
                    data={"chunk": chunk_number, "size": len(indices)},
                ),
            )

            outcomes = await asyncio.gather(
                *(
                    self._run_staggered(client, products[index], index, position, summary)
                    for position, index in enumerate(indices)
                ),
                return_exceptions=True,
            )

            for index, outcome in zip(indices, outcomes):
                if isinstance(outcome, SyncResult):
                    slots[index] = outcome
                elif isinstance(outcome, Exception):
                    slots[index] = SyncResult.failed(index, _describe(outcome))
                else:
                    raise outcome

            processed += len(indices)
            self._emit(
                summary,
                SyncEvent(
                    SyncEventKind.CHUNK_COMPLETED,
                    f"Chunk {chunk_number}/{len(chunks)} completed",
                    data={
                        "chunk": chunk_number,
                        "processed": processed,
                        "succeeded": sum(1 for r in slots if r is not None and r.ok),
                        "progress": round(processed / total * 100, 1),
                    },
                ),
            )

            if chunk_number < len(chunks) and self.config.chunk_pause > 0:
                await self._sleep(self.config.chunk_pause)

        summary.results = [slot for slot in slots if slot is not None]
        log.info(
            "Product sync finished",
            succeeded=summary.succeeded,
            failed=summary.failed,
            image_warnings=len(summary.warnings),
        )
        return summary

    async def _run_staggered(
        self,
        client: ShopifyAdminClient,
        raw: Any,
        index: int,
        position: int,
        summary: SyncSummary,
    ) -> SyncResult:
        delay = position * self.config.stagger_delay
        if delay > 0:
            await self._sleep(delay)
        return await self._sync_item(client, raw, index, summary)

    async def _sync_item(
        self,
        client: ShopifyAdminClient,
        raw: Any,
        index: int,
        summary: SyncSummary,
    ) -> SyncResult:
        try:
            record = ProductRecord.parse(raw)
        except InvalidProductRecord as e:
            title = raw.get("title") if isinstance(raw, dict) else None
            return self._fail(summary, index, e, title if isinstance(title, str) else None)

        def on_retry(attempt: int, error: BaseException, delay: float) -> None:
            self._emit(
                summary,
                SyncEvent(
                    SyncEventKind.ITEM_RETRY,
                    f"Retrying '{record.title}' after attempt {attempt}: {_describe(error)}",
                    index=index,
                    data={"attempt": attempt, "delay_seconds": delay},
                ),
            )

        try:
            created = await retry_with_backoff(
                lambda: client.create_product(record),
                max_attempts=self.config.max_attempts,
                backoff=self.config.backoff,
                retry_on=self.config.retry_on,
                sleep=self._sleep,
                on_retry=on_retry,
            )
        except Exception as e:
            return self._fail(summary, index, e, record.title)

        logger.info("Product created", index=index, title=record.title, remote_id=created.remote_id)

        if record.image:
            try:
                await retry_with_backoff(
                    lambda: client.attach_image(created, record.title, record.image),
                    max_attempts=self.config.max_attempts,
                    backoff=self.config.backoff,
                    retry_on=self.config.retry_on,
                    sleep=self._sleep,
                    on_retry=on_retry,
                )
            except Exception as e:
                # Soft failure: the product exists remotely, only the image is missing
                logger.warning(
                    "Image attach failed, product kept",
                    index=index,
                    title=record.title,
                    remote_id=created.remote_id,
                    error=_describe(e),
                )
                self._emit(
                    summary,
                    SyncEvent(
                        SyncEventKind.IMAGE_ATTACH_FAILED,
                        f"Image for '{record.title}' was not attached: {_describe(e)}",
                        index=index,
                        data={"remote_id": created.remote_id, "image": record.image},
                    ),
                )

        return SyncResult.created(index, created)

    def _fail(
        self,
        summary: SyncSummary,
        index: int,
        error: BaseException,
        title: str | None,
    ) -> SyncResult:
        message = _describe(error)
        logger.warning("Product sync failed", index=index, title=title, error=message)
        self._emit(
            summary,
            SyncEvent(
                SyncEventKind.ITEM_FAILED,
                message,
                index=index,
                data={"title": title, "error_type": type(error).__name__},
            ),
        )
        return SyncResult.failed(index, message, title=title)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__
