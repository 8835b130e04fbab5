"""Health check endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["version"] == "1.0.0"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_needs_no_key_behind_function_prefix(client):
    response = await client.get("/functions/v1/api/v1/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True


@pytest.mark.asyncio
async def test_health_response_carries_trace_id(client):
    response = await client.get("/v1/health", headers={"X-Trace-Id": "trc_fixed"})
    assert response.headers["X-Trace-Id"] == "trc_fixed"
