"""Supplier catalogue passthrough routes."""

import pytest


@pytest.mark.asyncio
async def test_search_is_not_captured_as_product_id(client, auth_headers, fake_cj):
    response = await client.get("/v1/products/search?q=lamp&pageSize=10", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["pageSize"] == 10
    assert fake_cj.calls == [("search_products", "lamp", 1, 10)]


@pytest.mark.asyncio
async def test_search_requires_query(client, auth_headers):
    response = await client.get("/v1/products/search", headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_product_detail(client, auth_headers):
    body = (await client.get("/v1/products/P42", headers=auth_headers)).json()
    assert body["product"]["pid"] == "P42"


@pytest.mark.asyncio
async def test_freight_quote_defaults(client, auth_headers, fake_cj):
    response = await client.post("/v1/products/freight", json={"vid": "V1"}, headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["cheapest"]["logisticName"] == "CJPacket"
    assert fake_cj.calls == [("calculate_freight", "V1", 1, "DE", "CN")]


@pytest.mark.asyncio
async def test_upstream_failure_is_bad_gateway(client, auth_headers, fake_cj, monkeypatch):
    from autopilot.errors.exceptions import UpstreamError

    async def down(product_id):
        raise UpstreamError("CJ", "Token expired")

    monkeypatch.setattr(fake_cj, "get_product", down)
    response = await client.get("/v1/products/P1", headers=auth_headers)
    assert response.status_code == 502
    assert response.json() == {"ok": False, "error": "CJ: Token expired", "code": "UPSTREAM_ERROR"}
