"""Listing routes: draft from a supplier variant, then publish idempotently per SKU."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.dependencies import get_auth, get_cj, get_db, get_pricing
from autopilot.models.common import ok
from autopilot.models.listing import ListingDraft, ListingPrepareRequest, ListingPublishRequest
from autopilot.services.auth_gate import AuthContext
from autopilot.services.listings import prepare_listing, publish_listing

router = APIRouter(tags=["Listings"])


@router.post("/listings/prepare")
async def prepare(
    body: ListingPrepareRequest,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
    cj=Depends(get_cj),
    pricing=Depends(get_pricing),
) -> dict:
    draft = await prepare_listing(db, auth.seller_id, body.cj_variant_id, cj, pricing)
    return ok(draft=ListingDraft.model_validate(draft).to_json())


@router.post("/listings/publish", status_code=201)
async def publish(
    body: ListingPublishRequest,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
):
    """201 when a new offer is created, 200 when the SKU's offer is updated."""
    payload, created = await publish_listing(db, auth.seller_id, body)
    return JSONResponse(status_code=201 if created else 200, content=ok(**payload))
