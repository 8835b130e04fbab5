"""Listing drafts and idempotent publication per SKU."""

import pytest

from autopilot.models.enums import JobType
from autopilot.repositories.job_repo import JobRepository
from autopilot.repositories.listing_repo import OfferRepository
from autopilot.services.pricing import PricingConfig, calculate_listing_price
from conftest import SELLER_ID


async def _prepare(client, auth_headers, vid="V-LAMP-W"):
    response = await client.post(
        "/v1/listings/prepare", json={"source": "cj", "cjVariantId": vid}, headers=auth_headers,
    )
    assert response.status_code == 200
    return response.json()["draft"]


@pytest.mark.asyncio
async def test_prepare_returns_priced_draft(client, auth_headers):
    draft = await _prepare(client, auth_headers)

    assert draft["title"] == "LED Desk Lamp"
    assert draft["sourcePrice"] == 10.0
    assert draft["images"] == ["https://img.example/lamp.jpg"]
    assert draft["suggestedPrice"] == calculate_listing_price(10.0, PricingConfig())
    assert draft["sourceProductId"].startswith("src_")


@pytest.mark.asyncio
async def test_prepare_twice_reuses_source_product(client, auth_headers):
    first = await _prepare(client, auth_headers)
    second = await _prepare(client, auth_headers)
    assert first["sourceProductId"] == second["sourceProductId"]


@pytest.mark.asyncio
async def test_prepare_rejects_other_sources(client, auth_headers):
    response = await client.post(
        "/v1/listings/prepare", json={"source": "aliexpress", "cjVariantId": "V1"}, headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_publish_is_idempotent_per_sku(client, auth_headers, session_factory):
    draft = await _prepare(client, auth_headers)
    body = {"sourceProductId": draft["sourceProductId"], "price": 19.99, "quantity": 3}

    created = await client.post("/v1/listings/publish", json=body, headers=auth_headers)
    assert created.status_code == 201
    again = await client.post("/v1/listings/publish", json={**body, "price": 17.49}, headers=auth_headers)
    assert again.status_code == 200

    assert again.json()["idempotent"] is True
    assert again.json()["offerId"] == created.json()["offerId"]
    assert again.json()["jobId"] == created.json()["jobId"]

    async with session_factory() as session:
        offer = await OfferRepository(session).get(created.json()["offerId"], SELLER_ID)
        jobs = await JobRepository(session).list_open(SELLER_ID, JobType.LISTING_PUBLISH)
    assert offer.price == 17.49
    assert offer.sku == "V-LAMP-W"
    assert len(jobs) == 1


@pytest.mark.asyncio
async def test_publish_unknown_source_product(client, auth_headers):
    response = await client.post(
        "/v1/listings/publish", json={"sourceProductId": "src_missing", "price": 10}, headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_publish_requires_positive_price(client, auth_headers):
    response = await client.post(
        "/v1/listings/publish", json={"sourceProductId": "src_x", "price": 0}, headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_publish_job_adds_then_revises_item(client, auth_headers, job_runner, fake_ebay, session_factory, clock):
    draft = await _prepare(client, auth_headers)
    body = {"sourceProductId": draft["sourceProductId"], "price": 19.99}
    offer_id = (await client.post("/v1/listings/publish", json=body, headers=auth_headers)).json()["offerId"]

    await job_runner.run_once()

    async with session_factory() as session:
        offer = await OfferRepository(session).get(offer_id, SELLER_ID)
    assert offer.state == "published"
    assert offer.listing_id in fake_ebay.items
    assert fake_ebay.items[offer.listing_id]["category_id"] == "175673"

    await client.post("/v1/listings/publish", json={**body, "price": 21.0}, headers=auth_headers)
    await job_runner.run_once()

    assert [c[0] for c in fake_ebay.calls] == ["add_fixed_price_item", "revise_fixed_price_item"]
    assert fake_ebay.items[offer.listing_id]["price"] == 21.0
