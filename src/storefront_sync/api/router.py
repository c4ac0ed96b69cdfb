"""API router that aggregates all endpoint routers."""

from fastapi import APIRouter

from storefront_sync.api import feed, health, products

api_router = APIRouter()

api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    products.router,
    prefix="/products",
    tags=["Products"],
)

api_router.include_router(
    feed.router,
    prefix="/feed",
    tags=["Feed"],
)
