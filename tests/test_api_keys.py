"""API key management routes."""

import pytest


@pytest.mark.asyncio
async def test_create_returns_key_once(client, auth_headers):
    response = await client.post("/v1/api-keys", json={"name": "warehouse"}, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["warning"] == "Store this key securely. It cannot be retrieved again."
    assert body["key"]["key"].startswith("ak_")
    assert body["key"]["name"] == "warehouse"
    assert body["key"]["isActive"] is True

    listing = (await client.get("/v1/api-keys", headers=auth_headers)).json()
    assert len(listing["keys"]) == 2
    for key in listing["keys"]:
        assert "key" not in key
        assert "keyHash" not in key


@pytest.mark.asyncio
async def test_new_key_authenticates(client, auth_headers):
    raw = (await client.post("/v1/api-keys", json={"name": "ci"}, headers=auth_headers)).json()["key"]["key"]
    response = await client.get("/v1/api-keys", headers={"X-API-Key": raw})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_deactivate_then_forbidden(client, auth_headers):
    created = (await client.post("/v1/api-keys", json={"name": "temp"}, headers=auth_headers)).json()["key"]

    patched = await client.patch(
        f"/v1/api-keys/{created['id']}", json={"isActive": False, "name": "retired"}, headers=auth_headers,
    )
    assert patched.status_code == 200
    assert patched.json()["key"]["isActive"] is False
    assert patched.json()["key"]["name"] == "retired"

    response = await client.get("/v1/api-keys", headers={"X-API-Key": created["key"]})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_single_key_and_last_used(client, api_key, auth_headers):
    key_id, _ = api_key
    response = await client.get(f"/v1/api-keys/{key_id}", headers=auth_headers)
    assert response.status_code == 200
    key = response.json()["key"]
    assert key["id"] == key_id
    assert key["lastUsedAt"] is not None


@pytest.mark.asyncio
async def test_other_sellers_key_is_not_found(client, auth_headers, session_factory):
    from conftest import create_api_key

    other_id, _ = await create_api_key(session_factory, seller_id="someone-else")
    response = await client.patch(f"/v1/api-keys/{other_id}", json={"isActive": False}, headers=auth_headers)
    assert response.status_code == 404
