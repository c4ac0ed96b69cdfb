"""Storefront feed endpoints."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel

from storefront_sync.api.dependencies import get_feed_reader
from storefront_sync.constants import CSV_FILENAME
from storefront_sync.models import ProductRecord
from storefront_sync.services.csv_export import products_to_csv
from storefront_sync.services.feed_reader import StorefrontFeedReader

router = APIRouter()


class FeedProduct(BaseModel):
    """Flattened feed product as shown in the product grid."""

    id: str
    title: str
    price: float
    description: str
    image: str

    @classmethod
    def from_record(cls, record: ProductRecord) -> "FeedProduct":
        return cls(
            id=record.id,
            title=record.title,
            price=float(record.price),
            description=record.description,
            image=record.image,
        )


class FeedResponse(BaseModel):
    products: list[FeedProduct]


@router.get("", response_model=FeedResponse)
async def read_feed(
    url: str = Query(..., min_length=1, description="Storefront URL or its products.json"),
    reader: StorefrontFeedReader = Depends(get_feed_reader),
) -> FeedResponse:
    """Fetch a storefront's public product listing."""
    records = await reader.fetch_products(url)
    return FeedResponse(products=[FeedProduct.from_record(r) for r in records])


@router.get("/export.csv")
async def export_feed_csv(
    url: str = Query(..., min_length=1, description="Storefront URL or its products.json"),
    reader: StorefrontFeedReader = Depends(get_feed_reader),
) -> Response:
    """Download a storefront's products as a Shopify import CSV."""
    records = await reader.fetch_products(url)
    return Response(
        content=products_to_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
