"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from storefront_sync import __version__
from storefront_sync.config import get_settings
from storefront_sync.middleware.timing import get_route_timings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    config: dict[str, Any]
    routes: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status, version, the active sync policy and recent
    per-route request timings.
    """
    settings = get_settings()

    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        config={
            "shopify_api_version": settings.shopify_api_version,
            "batch_size": settings.sync_batch_size,
            "max_retries": settings.sync_max_retries,
        },
        routes=get_route_timings(),
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}
