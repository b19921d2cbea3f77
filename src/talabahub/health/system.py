"""System health view for admins: overall status, service cards, metrics, recent errors.

Built on demand from four backend calls made together. Any backend failure
other than 401/403 yields a ``down`` view instead of an error response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import structlog

from talabahub.health.monitor import format_uptime
from talabahub.upstream.client import UpstreamClient
from talabahub.upstream.errors import UpstreamError, UpstreamUnavailable
from talabahub.upstream.schemas import page_items

logger = structlog.get_logger()

SYSTEM_BADGES: dict[str, tuple[str, str]] = {
    "healthy": ("Faol", "success"),
    "ok": ("Faol", "success"),
    "up": ("Faol", "success"),
    "degraded": ("Sekinlashtirilgan", "warning"),
}
DOWN_BADGE = ("Ishlamayapti", "danger")

# service -> (backend key, view key, default)
SERVICE_FIELDS: dict[str, tuple[tuple[str, str, float], ...]] = {
    "api": (("responseTime", "response_time_ms", 0),),
    "database": (("connections", "connections", 0), ("maxConnections", "max_connections", 100)),
    "storage": (("usedSpace", "used_space_gb", 0), ("totalSpace", "total_space_gb", 1000)),
    "cache": (("hitRate", "hit_rate_percent", 0), ("memoryUsage", "memory_usage_percent", 0)),
}

METRIC_FIELDS: tuple[tuple[str, str], ...] = (
    ("requestsPerMinute", "requests_per_minute"),
    ("activeUsers", "active_users"),
    ("errorRate", "error_rate_percent"),
    ("averageResponseTime", "average_response_time_ms"),
)


def system_badge(status: str) -> dict[str, str]:
    label, variant = SYSTEM_BADGES.get(status, DOWN_BADGE)
    return {"label": label, "variant": variant}


def _mapping(value: Any) -> Mapping[str, Any]:  # noqa: ANN401
    return value if isinstance(value, Mapping) else {}


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def service_card(name: str, raw: Any, checked_at: str, *, default_status: str = "up") -> dict[str, Any]:  # noqa: ANN401
    """One service card; missing or zero values take the card defaults."""
    raw = _mapping(raw)
    status = raw.get("status") or default_status
    card: dict[str, Any] = {"status": status, "badge": system_badge(status)}
    for source, target, default in SERVICE_FIELDS[name]:
        card[target] = raw.get(source) or default
    card["last_check"] = raw.get("lastCheck") or checked_at
    if name == "database":
        card["usage_percent"] = _percent(card["connections"], card["max_connections"])
    elif name == "storage":
        card["usage_percent"] = _percent(card["used_space_gb"], card["total_space_gb"])
    return card


def build_system_health(
    health: Any,  # noqa: ANN401
    services: Any,  # noqa: ANN401
    metrics: Any,  # noqa: ANN401
    errors: Any,  # noqa: ANN401
    *,
    now: datetime | None = None,
    refresh_seconds: float = 30.0,
) -> dict[str, Any]:
    checked_at = (now or datetime.now(timezone.utc)).isoformat()
    health, services, metrics = _mapping(health), _mapping(services), _mapping(metrics)
    status = health.get("status") or "healthy"
    uptime = health.get("uptime") or 0
    return {
        "status": status,
        "badge": system_badge(status),
        "uptime": uptime,
        "uptime_formatted": format_uptime(uptime),
        "services": {name: service_card(name, services.get(name), checked_at) for name in SERVICE_FIELDS},
        "metrics": {target: metrics.get(source) or 0 for source, target in METRIC_FIELDS},
        "errors": page_items(errors) if isinstance(errors, dict) else [],
        "checked_at": checked_at,
        "error": None,
        "refresh_seconds": refresh_seconds,
    }


def down_system_health(
    error: str,
    *,
    now: datetime | None = None,
    refresh_seconds: float = 30.0,
) -> dict[str, Any]:
    """Every service down and every counter zero."""
    checked_at = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "status": "down",
        "badge": system_badge("down"),
        "uptime": 0,
        "uptime_formatted": format_uptime(0),
        "services": {
            name: service_card(name, None, checked_at, default_status="down") for name in SERVICE_FIELDS
        },
        "metrics": {target: 0 for _, target in METRIC_FIELDS},
        "errors": [],
        "checked_at": checked_at,
        "error": error,
        "refresh_seconds": refresh_seconds,
    }


async def fetch_system_health(
    upstream: UpstreamClient,
    token: str,
    *,
    error_limit: int = 10,
    refresh_seconds: float = 30.0,
) -> dict[str, Any]:
    """Query health, services, metrics and recent errors together.

    Raises the backend's ``UpstreamError`` on 401/403 so the session
    handling applies; every other failure returns the down view.
    """
    try:
        health, services, metrics, errors = await asyncio.gather(
            upstream.get_health(),
            upstream.get_health_services(token),
            upstream.get_health_metrics(),
            upstream.get_health_errors(token, {"limit": error_limit}),
        )
    except UpstreamError as exc:
        if exc.is_auth_failure or exc.is_forbidden:
            raise
        logger.warning("system_health_failed", status=exc.status, error=exc.message)
        return down_system_health(exc.message, refresh_seconds=refresh_seconds)
    except UpstreamUnavailable as exc:
        logger.warning("system_health_failed", error=str(exc))
        return down_system_health("Backend unavailable", refresh_seconds=refresh_seconds)
    return build_system_health(health, services, metrics, errors, refresh_seconds=refresh_seconds)
