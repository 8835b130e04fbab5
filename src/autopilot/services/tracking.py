"""Pull supplier tracking and push it to the marketplace, at most once per order."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.db.models.order import ShipmentRow
from autopilot.errors.exceptions import NotFoundError, ValidationError
from autopilot.models.enums import OrderStatus
from autopilot.repositories.order_repo import OrderRepository
from autopilot.services.id_generator import generate_id

logger = logging.getLogger(__name__)

_DEFAULT_CARRIER = "CJPacket"


async def sync_tracking(session: AsyncSession, seller_id: str, order_pk: str, cj, ebay) -> dict:
    """Copy the CJ tracking number to eBay via ``CompleteSale``.

    Once a shipment is flagged ``tracking_pushed`` neither CJ nor eBay is
    contacted again. The shipment row is committed before the marketplace
    call so a failed push keeps the tracking number for the retry.
    """
    order = await OrderRepository(session).get(order_pk, seller_id)
    if not order:
        raise NotFoundError("Order", order_pk)

    shipment = order.shipments[0] if order.shipments else None
    if shipment and shipment.tracking_pushed:
        return {
            "updated": False,
            "message": "Tracking already pushed to eBay",
            "trackingNumber": shipment.tracking_number,
            "carrier": shipment.carrier,
        }

    if not order.supplier_order_id:
        raise ValidationError("No CJ order ID found. Create CJ order first via /fulfill.")

    detail = await cj.get_order_detail(order.supplier_order_id)
    tracking_number = detail.get("trackNumber") or ""
    carrier = detail.get("logisticName") or _DEFAULT_CARRIER
    if not tracking_number:
        return {"updated": False, "message": "CJ has no tracking yet"}

    if shipment:
        shipment.tracking_number = tracking_number
        shipment.carrier = carrier
    else:
        shipment = ShipmentRow(
            shipment_id=generate_id("shp_"),
            seller_id=seller_id,
            tracking_number=tracking_number,
            carrier=carrier,
            tracking_pushed=False,
        )
        order.shipments.append(shipment)
    await session.commit()

    await ebay.complete_sale(order.order_id, carrier, tracking_number)

    shipment.tracking_pushed = True
    order.order_status = OrderStatus.SHIPPED
    order.needs_fulfillment = False
    await session.commit()
    logger.info("Pushed tracking %s (%s) for order %s", tracking_number, carrier, order.order_id)
    return {
        "updated": True,
        "trackingNumber": tracking_number,
        "carrier": carrier,
        "message": "Tracking pushed to eBay",
    }
