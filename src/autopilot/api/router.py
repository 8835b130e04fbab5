"""Master API router mounted at /v1."""

from fastapi import APIRouter

from autopilot.api.routes import (
    api_keys,
    health,
    jobs,
    listings,
    orders,
    products,
    sku_map,
)

api_router = APIRouter(prefix="/v1")

api_router.include_router(health.router)
api_router.include_router(orders.router)
api_router.include_router(jobs.router)
api_router.include_router(sku_map.router)
api_router.include_router(products.router)
api_router.include_router(listings.router)
api_router.include_router(api_keys.router)
