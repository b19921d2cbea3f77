"""Unit tests for the admin system health view."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from talabahub.health.system import (
    build_system_health,
    down_system_health,
    fetch_system_health,
    service_card,
    system_badge,
)
from talabahub.upstream.errors import UpstreamError

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestBadges:
    def test_known_statuses(self):
        assert system_badge("healthy") == {"label": "Faol", "variant": "success"}
        assert system_badge("up") == {"label": "Faol", "variant": "success"}
        assert system_badge("degraded") == {"label": "Sekinlashtirilgan", "variant": "warning"}

    def test_anything_else_is_down(self):
        assert system_badge("down") == {"label": "Ishlamayapti", "variant": "danger"}
        assert system_badge("starting") == {"label": "Ishlamayapti", "variant": "danger"}


class TestServiceCards:
    def test_defaults_for_missing_service(self):
        card = service_card("database", None, "2024-03-01T12:00:00+00:00")
        assert card == {
            "status": "up",
            "badge": {"label": "Faol", "variant": "success"},
            "connections": 0,
            "max_connections": 100,
            "last_check": "2024-03-01T12:00:00+00:00",
            "usage_percent": 0.0,
        }

    def test_zero_total_takes_default(self):
        card = service_card("storage", {"status": "up", "usedSpace": 250, "totalSpace": 0}, "t")
        assert card["total_space_gb"] == 1000
        assert card["usage_percent"] == 25.0

    def test_backend_values_kept(self):
        card = service_card("cache", {"status": "down", "hitRate": 87.5, "lastCheck": "t0"}, "t1")
        assert card["status"] == "down"
        assert card["badge"]["variant"] == "danger"
        assert card["hit_rate_percent"] == 87.5
        assert card["memory_usage_percent"] == 0
        assert card["last_check"] == "t0"


class TestBuild:
    def test_full_view(self):
        view = build_system_health(
            {"status": "degraded", "uptime": 90061},
            {"api": {"status": "up", "responseTime": 42}, "database": {"connections": 30, "maxConnections": 60}},
            {"requestsPerMinute": 120, "errorRate": 1.5},
            {"data": [{"type": "TypeError", "message": "x", "count": 3}]},
            now=NOW,
        )
        assert view["status"] == "degraded"
        assert view["badge"]["label"] == "Sekinlashtirilgan"
        assert view["uptime_formatted"] == "1d 1h 1m"
        assert view["services"]["api"]["response_time_ms"] == 42
        assert view["services"]["database"]["usage_percent"] == 50.0
        assert view["services"]["cache"]["status"] == "up"
        assert view["metrics"] == {
            "requests_per_minute": 120,
            "active_users": 0,
            "error_rate_percent": 1.5,
            "average_response_time_ms": 0,
        }
        assert view["errors"] == [{"type": "TypeError", "message": "x", "count": 3}]
        assert view["error"] is None

    def test_blank_responses(self):
        view = build_system_health(None, None, None, None, now=NOW)
        assert view["status"] == "healthy"
        assert view["uptime"] == 0
        assert view["errors"] == []
        assert set(view["services"]) == {"api", "database", "storage", "cache"}

    def test_down_view(self):
        view = down_system_health("boom", now=NOW, refresh_seconds=30)
        assert view["status"] == "down"
        assert view["error"] == "boom"
        assert all(card["status"] == "down" for card in view["services"].values())
        assert view["services"]["storage"]["total_space_gb"] == 1000
        assert set(view["metrics"].values()) == {0}
        assert view["checked_at"] == NOW.isoformat()


@pytest.mark.asyncio
class TestFetch:
    async def test_error_limit_forwarded(self, backend, upstream):
        backend.add("GET", "/health", {"status": "healthy", "uptime": 60})
        backend.add("GET", "/health/services", {})
        backend.add("GET", "/health/metrics", {})
        backend.add("GET", "/health/errors", {"data": []})

        view = await fetch_system_health(upstream, "tok", error_limit=10)
        assert view["status"] == "healthy"
        errors_call = next(c for c in backend.calls if c.url.path.endswith("/health/errors"))
        assert errors_call.url.params["limit"] == "10"
        assert errors_call.headers["Authorization"] == "Bearer tok"

    async def test_server_error_gives_down_view(self, backend, upstream):
        backend.add("GET", "/health", {"status": "healthy"})
        backend.add("GET", "/health/services", {"message": "db down"}, status=500)
        backend.add("GET", "/health/metrics", {})
        backend.add("GET", "/health/errors", {"data": []})

        view = await fetch_system_health(upstream, "tok")
        assert view["status"] == "down"
        assert view["error"] == "db down"

    async def test_forbidden_propagates(self, backend, upstream):
        backend.add("GET", "/health", {"status": "healthy"})
        backend.add("GET", "/health/services", {"message": "Forbidden"}, status=403)
        backend.add("GET", "/health/metrics", {})
        backend.add("GET", "/health/errors", {"data": []})

        with pytest.raises(UpstreamError) as exc_info:
            await fetch_system_health(upstream, "tok")
        assert exc_info.value.status == 403
