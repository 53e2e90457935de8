"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status and version."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_degraded_without_redis(client):
    """Redis is never initialized in tests — reported, not fatal."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["redis"].startswith("error")


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
