"""Supplier catalogue passthrough: search, product detail and freight quotes."""

from fastapi import APIRouter, Depends, Query

from autopilot.dependencies import get_auth, get_cj
from autopilot.models.common import ok
from autopilot.models.listing import FreightRequest
from autopilot.services.auth_gate import AuthContext

router = APIRouter(tags=["Products"])


# Declared before /products/{product_id} so "search" is not captured as an id
@router.get("/products/search")
async def search_products(
    q: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200, alias="pageSize"),
    auth: AuthContext = Depends(get_auth),
    cj=Depends(get_cj),
) -> dict:
    result = await cj.search_products(q, page=page, page_size=page_size)
    return ok(products=result["products"], total=result["total"], page=page, pageSize=page_size)


@router.post("/products/freight")
async def freight_quote(
    body: FreightRequest,
    auth: AuthContext = Depends(get_auth),
    cj=Depends(get_cj),
) -> dict:
    options = await cj.calculate_freight(
        body.vid,
        body.quantity,
        end_country_code=body.country_code,
        start_country_code=body.start_country_code,
    )
    return ok(options=options, cheapest=options[0] if options else None)


@router.get("/products/{product_id}")
async def get_product(
    product_id: str,
    auth: AuthContext = Depends(get_auth),
    cj=Depends(get_cj),
) -> dict:
    return ok(product=await cj.get_product(product_id))
