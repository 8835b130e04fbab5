"""Import marketplace orders into the local order tables."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.order import OrderItemRow, OrderRow
from autopilot.models.enums import OrderStatus
from autopilot.repositories.order_repo import OrderRepository
from autopilot.services.id_generator import generate_id

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "Active": OrderStatus.PENDING,
    "Completed": OrderStatus.COMPLETED,
    "Cancelled": OrderStatus.CANCELLED,
    "Shipped": OrderStatus.SHIPPED,
}

# Marketplace states that need a supplier order
_FULFILLABLE = {"Active", "Completed"}

# Local states reached through fulfillment; a marketplace refresh must not undo them
_LOCAL_PROGRESS = {OrderStatus.PROCESSING, OrderStatus.SHIPPED}


def _buyer_json(order: dict) -> dict:
    return {
        "name": order.get("buyerUserId", ""),
        "address": order.get("address") or {},
        "items": order.get("items") or [],
    }


async def import_orders(
    session: AsyncSession,
    seller_id: str,
    ebay,
    lookback_days: int = 30,
    now: datetime | None = None,
) -> dict:
    """Upsert the seller's recent marketplace orders.

    Returns:
        ``{"synced": n, "total": m}`` where ``total`` counts orders returned by
        the marketplace and ``synced`` those written locally.
    """
    now = now or datetime.now(timezone.utc)
    remote_orders = await ebay.get_orders(now - timedelta(days=lookback_days), now)

    repo = OrderRepository(session)
    synced = 0
    for remote in remote_orders:
        order_id = remote.get("orderId")
        if not order_id:
            continue

        remote_status = remote.get("orderStatus") or "Active"
        status = _STATUS_MAP.get(remote_status, OrderStatus.PENDING)
        existing = await repo.get_by_marketplace_id(seller_id, order_id)

        if existing:
            if not (existing.order_status in _LOCAL_PROGRESS and status in (OrderStatus.PENDING, OrderStatus.COMPLETED)):
                existing.order_status = status
            existing.total_price = remote.get("total") or 0.0
            existing.buyer_json = _buyer_json(remote)
            existing.last_synced_at = now
        else:
            order = OrderRow(
                order_pk=generate_id("ord_"),
                seller_id=seller_id,
                order_id=order_id,
                order_status=status,
                total_price=remote.get("total") or 0.0,
                buyer_json=_buyer_json(remote),
                needs_fulfillment=remote_status in _FULFILLABLE,
                last_synced_at=now,
                items=[
                    OrderItemRow(
                        item_id=generate_id("itm_"),
                        seller_id=seller_id,
                        line_item_id=item.get("lineItemId", ""),
                        sku=item.get("sku", ""),
                        title=item.get("title", ""),
                        quantity=item.get("qty") or 1,
                        price=item.get("price") or 0.0,
                    )
                    for item in remote.get("items") or []
                ],
                shipments=[],
            )
            session.add(order)
        synced += 1

    await session.flush()
    logger.info("Imported %d/%d marketplace orders for seller %s", synced, len(remote_orders), seller_id)
    return {"synced": synced, "total": len(remote_orders)}
