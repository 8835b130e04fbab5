"""Supplier order creation for marketplace orders.

Both entry points are idempotent per order: once an order carries a
``supplier_order_id`` no second supplier order is ever created.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autopilot.errors.exceptions import NotFoundError, ValidationError
from autopilot.models.enums import JobType, OrderStatus
from autopilot.repositories.job_repo import JobRepository
from autopilot.repositories.order_repo import OrderRepository
from autopilot.repositories.sku_map_repo import SkuMappingRepository
from autopilot.workers.queue import enqueue_job

logger = logging.getLogger(__name__)

_DEFAULT_COUNTRY_CODE = "DE"


async def request_fulfillment(session: AsyncSession, seller_id: str, order_pk: str) -> dict:
    """Queue an ``order_fulfill`` job unless the order is already fulfilled or queued."""
    order = await OrderRepository(session).get(order_pk, seller_id)
    if not order:
        raise NotFoundError("Order", order_pk)

    shipped = next((s for s in order.shipments if s.tracking_number), None)
    if shipped:
        return {
            "message": "Order already fulfilled",
            "fulfillment": {"trackingNumber": shipped.tracking_number, "carrier": shipped.carrier},
            "idempotent": True,
        }

    if order.supplier_order_id:
        return {
            "message": "CJ order already created",
            "cjOrderId": order.supplier_order_id,
            "idempotent": True,
        }

    for job in await JobRepository(session).list_open(seller_id, JobType.ORDER_FULFILL):
        if (job.input or {}).get("orderId") == order_pk:
            return {
                "message": "Fulfillment job already queued",
                "jobId": job.job_id,
                "state": job.state,
                "idempotent": True,
            }

    job = await enqueue_job(session, JobType.ORDER_FULFILL, seller_id, {"orderId": order_pk})
    await session.commit()
    return {"message": "Fulfillment job queued", "jobId": job.job_id, "state": job.state}


def _shipping_payload(order) -> dict:
    buyer = order.buyer_json or {}
    address = buyer.get("address") or {}
    country = address.get("country") or ""
    return {
        "orderNumber": order.order_id,
        "shippingZip": address.get("postalCode", ""),
        "shippingCountryCode": country if len(country) == 2 else _DEFAULT_COUNTRY_CODE,
        "shippingCountry": country or "Germany",
        "shippingProvince": address.get("state") or address.get("city") or "",
        "shippingCity": address.get("city", ""),
        "shippingAddress": ", ".join(p for p in (address.get("street1"), address.get("street2")) if p),
        "shippingCustomerName": address.get("name") or buyer.get("name", ""),
        "shippingPhone": address.get("phone", ""),
        "remark": f"eBay Order {order.order_id}",
    }


async def create_supplier_order(session: AsyncSession, seller_id: str, order_pk: str, cj) -> dict:
    """Create the CJ order for a marketplace order, or return the existing reference."""
    order = await OrderRepository(session).get(order_pk, seller_id)
    if not order:
        raise NotFoundError("Order", order_pk)

    if order.supplier_order_id:
        return {"message": "Already fulfilled", "cjOrderId": order.supplier_order_id}

    skus = [item.sku for item in order.items if item.sku]
    mappings = await SkuMappingRepository(session).list_active_for_skus(seller_id, skus)
    if not mappings:
        raise ValidationError(
            f"No SKU mappings found for SKUs: {', '.join(skus)}. Create them via POST /v1/sku-map first."
        )

    quantities = {item.sku: item.quantity for item in order.items}
    payload = _shipping_payload(order)
    payload["products"] = [
        {"vid": m.cj_variant_id, "quantity": quantities.get(m.ebay_sku) or m.default_qty}
        for m in mappings
    ]

    cj_order_id = await cj.create_order(payload)
    order.supplier_order_id = cj_order_id
    order.order_status = OrderStatus.PROCESSING
    await session.flush()
    logger.info("Created CJ order %s for order %s", cj_order_id, order.order_id)
    return {"cjOrderId": cj_order_id, "message": "CJ order created"}
