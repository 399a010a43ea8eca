"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("database") in ("configured", "not_configured")


async def test_response_carries_request_id(client: AsyncClient) -> None:
    """A safe client X-Request-ID is echoed back; a missing one is generated."""
    echoed = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert echoed.headers["X-Request-ID"] == "abc-123"
    generated = await client.get("/api/v1/health")
    assert generated.headers.get("X-Request-ID")


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    """Request IDs with characters unsafe for logs are replaced."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id;drop"})
    assert response.headers["X-Request-ID"] != "bad id;drop"
