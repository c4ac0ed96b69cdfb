"""Shared outbound HTTP client."""

import httpx
import structlog

from storefront_sync import __version__
from storefront_sync.config import Settings, get_settings

logger = structlog.get_logger()

_http_client: httpx.AsyncClient | None = None


def build_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an AsyncClient with the configured timeout and user agent."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"User-Agent": f"{settings.user_agent}/{__version__}"},
        follow_redirects=True,
        transport=transport,
    )


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the global async HTTP client."""
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = build_http_client()
        logger.info("HTTP client created")
    return _http_client


async def close_http_client() -> None:
    """Close the HTTP client on shutdown."""
    global _http_client
    if _http_client:
        await _http_client.aclose()
        _http_client = None
