"""Health endpoint tests."""

import pytest
from conftest import auth_headers
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient, backend) -> None:
    """GET /ready checks the backend liveness probe."""
    backend.add("GET", "/health/live", {"status": "ok"})
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"upstream": "ok"}


@pytest.mark.asyncio
async def test_readiness_degraded(client: AsyncClient, backend) -> None:
    """A failing backend probe marks the gateway degraded."""
    backend.add("GET", "/health/live", {"message": "down"}, status=503)
    data = (await client.get("/ready")).json()
    assert data["status"] == "degraded"
    assert data["checks"]["upstream"].startswith("error")


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns version and environment."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert "environment" in data


@pytest.mark.asyncio
async def test_admin_backend_health(client: AsyncClient, backend) -> None:
    """Refresh polls the backend probes and returns the formatted snapshot."""
    backend.add("GET", "/health", {"status": "ok"})
    backend.add("GET", "/health/ready", {"status": "error"})
    backend.add("GET", "/health/live", {"status": "ok"})
    backend.add("GET", "/health/metrics", {"uptime": 3700, "memory": {"heapUsed": 1024, "heapTotal": 4096}})

    before = (await client.get("/api/v1/admin/health", headers=auth_headers(role="admin"))).json()
    assert before["health"] is None

    response = await client.post("/api/v1/admin/health/refresh", headers=auth_headers(role="admin"))
    assert response.status_code == 200
    data = response.json()
    assert data["readiness"]["badge"] == {"label": "Xatolik", "variant": "danger"}
    assert data["metrics"]["uptime_formatted"] == "0d 1h 1m"
    assert data["metrics"]["heap_used_percent"] == 25.0
    assert data["metrics"]["memory_formatted"]["heapUsed"] == "1 KB"
    assert data["polling"] is False


@pytest.mark.asyncio
async def test_admin_backend_health_forbidden(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/health", headers=auth_headers(role="student"))
    assert response.status_code == 403


def _system_probes(backend, services_status: int = 200) -> None:
    backend.add("GET", "/health", {"status": "healthy", "uptime": 3700})
    backend.add(
        "GET", "/health/services",
        {"api": {"status": "up", "responseTime": 12}} if services_status == 200 else {"message": "nope"},
        status=services_status,
    )
    backend.add("GET", "/health/metrics", {"activeUsers": 7})
    backend.add("GET", "/health/errors", {"data": [{"type": "DbError", "message": "timeout", "count": 2}]})


@pytest.mark.asyncio
async def test_admin_system_health(client: AsyncClient, backend) -> None:
    """Service cards, metrics and recent errors for the admin dashboard."""
    _system_probes(backend)
    response = await client.get("/api/v1/admin/system-health", headers=auth_headers(role="admin"))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["uptime_formatted"] == "0d 1h 1m"
    assert data["services"]["api"]["response_time_ms"] == 12
    assert data["metrics"]["active_users"] == 7
    assert data["errors"][0]["type"] == "DbError"
    assert data["refresh_seconds"] == 30.0


@pytest.mark.asyncio
async def test_admin_system_health_down_on_backend_failure(client: AsyncClient, backend) -> None:
    _system_probes(backend, services_status=503)
    response = await client.get("/api/v1/admin/system-health", headers=auth_headers(role="admin"))
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "down"
    assert data["badge"] == {"label": "Ishlamayapti", "variant": "danger"}
    assert data["services"]["cache"]["status"] == "down"


@pytest.mark.asyncio
async def test_admin_system_health_backend_forbidden(client: AsyncClient, backend) -> None:
    _system_probes(backend, services_status=403)
    response = await client.get("/api/v1/admin/system-health", headers=auth_headers(role="admin"))
    assert response.status_code == 403
    assert response.json()["redirect"] == "/dashboard"


@pytest.mark.asyncio
async def test_admin_system_health_requires_admin(client: AsyncClient, backend) -> None:
    response = await client.get("/api/v1/admin/system-health", headers=auth_headers(role="partner"))
    assert response.status_code == 403
    assert backend.calls == []
