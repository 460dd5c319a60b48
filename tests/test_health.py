"""Smoke tests for health and app wiring."""

from conftest import added, make_event, removed
from httpx import AsyncClient


async def test_health_returns_healthy(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status healthy."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["uptime_seconds"] >= 0
    assert "timestamp" in data


async def test_ready_without_firebase_returns_503(client: AsyncClient) -> None:
    """Readiness is 503 when no notification service was wired at startup."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json() == {
        "status": "not_ready",
        "message": "Firebase credentials not configured",
    }


async def test_ready_reports_listener_state(client: AsyncClient, service) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["listener_running"] is False
    assert data["listener_phase"] == "awaiting_first_batch"
    assert data["stream_failures"] == 0
    assert data["change_actions"] == {}


async def test_ready_counts_processed_changes(client: AsyncClient, service) -> None:
    await service.listener.handle_batch([added(make_event("E1"))])
    await service.listener.handle_batch([added(make_event("E2")), removed("E1")])
    data = (await client.get("/api/v1/health/ready")).json()
    assert data["listener_phase"] == "live"
    assert data["change_actions"] == {
        "suppress_initial_load": 1,
        "new": 1,
        "removed": 1,
    }


async def test_root_returns_banner(client: AsyncClient) -> None:
    """GET / lists the public routes."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "active"
    assert "POST /api/v1/events/{event_id}/notify" in data["endpoints"]


async def test_responses_carry_request_id_and_security_headers(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


async def test_unsafe_request_id_is_replaced(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id!"})
    assert response.headers["X-Request-ID"] != "bad id!"
    assert len(response.headers["X-Request-ID"]) == 36
