"""Fulfillment requests and supplier order creation are idempotent per order."""

import pytest

from autopilot.db.models.order import ShipmentRow
from autopilot.errors.exceptions import ValidationError
from autopilot.models.enums import JobType
from autopilot.repositories.job_repo import JobRepository
from autopilot.repositories.order_repo import OrderRepository
from autopilot.repositories.sku_map_repo import SkuMappingRepository
from autopilot.services.fulfillment import create_supplier_order
from conftest import SELLER_ID


async def _map_sku(session_factory, sku="LAMP-W", vid="V-LAMP-W"):
    async with session_factory() as session:
        await SkuMappingRepository(session).create(
            sku_map_id=f"sku_{sku}", seller_id=SELLER_ID, ebay_sku=sku, cj_variant_id=vid,
            default_qty=1, min_margin_pct=20.0, active=True,
        )
        await session.commit()


@pytest.mark.asyncio
async def test_fulfill_enqueues_once(client, auth_headers, seed_order, session_factory):
    order = await seed_order()

    first = await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)
    second = await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)

    assert first.status_code == 200
    assert first.json()["message"] == "Fulfillment job queued"
    assert second.json()["idempotent"] is True
    assert second.json()["jobId"] == first.json()["jobId"]
    async with session_factory() as session:
        jobs = await JobRepository(session).list_open(SELLER_ID, JobType.ORDER_FULFILL)
    assert len(jobs) == 1
    assert jobs[0].input == {"orderId": order.order_pk}


@pytest.mark.asyncio
async def test_fulfill_returns_existing_supplier_order(client, auth_headers, seed_order):
    order = await seed_order(supplier_order_id="CJ-EXISTING")

    body = (await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)).json()

    assert body["ok"] is True
    assert body["idempotent"] is True
    assert body["cjOrderId"] == "CJ-EXISTING"


@pytest.mark.asyncio
async def test_fulfill_returns_existing_tracking(client, auth_headers, seed_order, session_factory):
    order = await seed_order(supplier_order_id="CJ1")
    async with session_factory() as session:
        session.add(ShipmentRow(
            shipment_id="shp_1", order_pk=order.order_pk, seller_id=SELLER_ID,
            tracking_number="LX123", carrier="DHL", tracking_pushed=True,
        ))
        await session.commit()

    body = (await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)).json()

    assert body["idempotent"] is True
    assert body["fulfillment"] == {"trackingNumber": "LX123", "carrier": "DHL"}


@pytest.mark.asyncio
async def test_fulfill_other_sellers_order_is_not_found(client, auth_headers, seed_order):
    order = await seed_order(seller_id="someone-else")
    response = await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_supplier_order_created_at_most_once(db_session, session_factory, seed_order, fake_cj):
    order = await seed_order()
    await _map_sku(session_factory)

    first = await create_supplier_order(db_session, SELLER_ID, order.order_pk, fake_cj)
    await db_session.commit()
    second = await create_supplier_order(db_session, SELLER_ID, order.order_pk, fake_cj)

    assert first == {"cjOrderId": "CJ0001", "message": "CJ order created"}
    assert second["cjOrderId"] == "CJ0001"
    assert len(fake_cj.created_orders) == 1

    payload = fake_cj.created_orders[0]
    assert payload["products"] == [{"vid": "V-LAMP-W", "quantity": 2}]
    assert payload["shippingCountryCode"] == "DE"
    assert payload["shippingCity"] == "Berlin"
    assert payload["orderNumber"] == "12-34567-89012"

    row = await OrderRepository(db_session).get(order.order_pk, SELLER_ID)
    assert row.supplier_order_id == "CJ0001"
    assert row.order_status == "processing"


@pytest.mark.asyncio
async def test_supplier_order_requires_sku_mapping(db_session, seed_order, fake_cj):
    order = await seed_order(sku="UNMAPPED")
    with pytest.raises(ValidationError, match="UNMAPPED"):
        await create_supplier_order(db_session, SELLER_ID, order.order_pk, fake_cj)
    assert fake_cj.created_orders == []


@pytest.mark.asyncio
async def test_fulfill_job_end_to_end(client, auth_headers, seed_order, session_factory, job_runner, fake_cj):
    order = await seed_order()
    await _map_sku(session_factory)
    job_id = (await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)).json()["jobId"]

    await job_runner.run_once()

    job = (await client.get(f"/v1/jobs/{job_id}", headers=auth_headers)).json()["job"]
    assert job["state"] == "done"
    assert job["output"]["cjOrderId"] == "CJ0001"
    again = (await client.post(f"/v1/orders/{order.order_pk}/fulfill", headers=auth_headers)).json()
    assert again["cjOrderId"] == "CJ0001"
    assert len(fake_cj.created_orders) == 1
