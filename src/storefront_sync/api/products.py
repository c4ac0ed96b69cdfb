"""Product sync API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from storefront_sync.api.dependencies import get_sync_pipeline
from storefront_sync.api.errors import ApiError
from storefront_sync.models import SyncResult
from storefront_sync.services.product_sync import ProductSyncPipeline

router = APIRouter()


# =============================================================================
# Models
# =============================================================================


class CreateProductsRequest(BaseModel):
    """Request body for pushing products into a store."""

    model_config = ConfigDict(populate_by_name=True)

    shop_url: str | None = Field(None, alias="shopUrl", description="Target *.myshopify.com store")
    access_token: str | None = Field(None, alias="accessToken", description="Admin API access token")
    products: list[Any] | None = Field(
        None,
        description="Product records: id, title, price, description, image",
    )


class CreateProductsResponse(BaseModel):
    """Aggregate sync result, one entry per submitted product in input order."""

    success: bool
    message: str
    products: list[SyncResult]
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "/create",
    response_model=CreateProductsResponse,
    response_model_exclude_none=True,
)
async def create_products(
    request: CreateProductsRequest,
    pipeline: ProductSyncPipeline = Depends(get_sync_pipeline),
) -> CreateProductsResponse:
    """
    Create the submitted products in the target store.

    Products are created in chunks with retries. A failing product does not
    stop the others; a missing image only shows up in ``warnings``.

    **Errors:**
    - `400`: a required field is missing, or the shop URL is not a myshopify.com host
    - `500`: every product failed; the body carries the first failure
    """
    if not request.shop_url or not request.access_token or request.products is None:
        raise ApiError(400, "Missing required fields")

    summary = await pipeline.run(request.products, request.shop_url, request.access_token)

    if summary.total and not summary.succeeded:
        raise ApiError(500, summary.first_error or "Unknown error occurred while syncing products")

    if summary.failed:
        message = (
            f"{summary.succeeded} of {summary.total} products synced successfully; "
            f"first error: {summary.first_error}"
        )
    else:
        message = f"{summary.succeeded} products synced successfully"

    return CreateProductsResponse(
        success=summary.failed == 0,
        message=message,
        products=summary.results,
        warnings=summary.warnings,
    )
