"""Marketplace order routes: listing, sync, fulfillment and tracking."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.config import settings
from autopilot.dependencies import get_auth, get_cj, get_db, get_ebay
from autopilot.models.common import ok
from autopilot.models.enums import JobType, OrderFilter
from autopilot.models.order import OrderResponse
from autopilot.repositories.order_repo import OrderRepository
from autopilot.services.auth_gate import AuthContext
from autopilot.services.fulfillment import request_fulfillment
from autopilot.services.order_sync import import_orders
from autopilot.services.tracking import sync_tracking
from autopilot.workers.queue import enqueue_job

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


@router.get("/orders")
async def list_orders(
    status: OrderFilter = Query(OrderFilter.ALL),
    sync: bool = Query(False),
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
    ebay=Depends(get_ebay),
) -> dict:
    """List the seller's newest orders; ``sync=true`` imports from eBay first."""
    if sync:
        await import_orders(
            db,
            auth.seller_id,
            ebay,
            lookback_days=settings.ebay_order_lookback_days,
        )
        await db.commit()

    rows = await OrderRepository(db).list_filtered(auth.seller_id, status)
    orders = [OrderResponse.model_validate(row).to_json() for row in rows]
    return ok(orders=orders, count=len(orders))


@router.post("/orders/sync")
async def queue_orders_sync(
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    job = await enqueue_job(db, JobType.ORDERS_SYNC, auth.seller_id)
    await db.commit()
    return ok(jobId=job.job_id, message="Order sync job queued")


@router.post("/orders/{order_id}/fulfill")
async def fulfill_order(
    order_id: str,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return ok(**await request_fulfillment(db, auth.seller_id, order_id))


@router.post("/orders/{order_id}/sync-tracking")
async def sync_order_tracking(
    order_id: str,
    auth: AuthContext = Depends(get_auth),
    db: AsyncSession = Depends(get_db),
    cj=Depends(get_cj),
    ebay=Depends(get_ebay),
) -> dict:
    return ok(**await sync_tracking(db, auth.seller_id, order_id, cj, ebay))
