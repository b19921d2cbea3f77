"""Health, readiness, and version endpoints, plus the admin view of backend health."""

from fastapi import APIRouter, Depends

from talabahub.auth.dependencies import require_role
from talabahub.auth.session import SessionContext
from talabahub.config import get_settings
from talabahub.health.monitor import UpstreamHealthMonitor, get_monitor
from talabahub.health.system import fetch_system_health
from talabahub.redis_client import optional_redis
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe; returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe; checks backend and (when configured) Redis connectivity."""
    checks: dict[str, object] = {}

    try:
        await upstream.get_health_live()
        checks["upstream"] = "ok"
    except Exception as exc:
        checks["upstream"] = f"error: {exc}"

    if get_settings().redis_url:
        redis = optional_redis()
        if redis is None:
            checks["redis"] = "error: not connected"
        else:
            try:
                await redis.ping()
                checks["redis"] = "ok"
            except Exception as exc:
                checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return gateway version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/api/v1/admin/health")
async def backend_health(
    _session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    monitor: UpstreamHealthMonitor = Depends(get_monitor),  # noqa: B008
) -> dict[str, object]:
    """Latest snapshot of the backend probes."""
    return monitor.snapshot()


@router.post("/api/v1/admin/health/refresh")
async def refresh_backend_health(
    _session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    monitor: UpstreamHealthMonitor = Depends(get_monitor),  # noqa: B008
) -> dict[str, object]:
    """Poll the probes now instead of waiting for the next round."""
    await monitor.poll_once()
    return monitor.snapshot()


@router.get("/api/v1/admin/system-health")
async def system_health(
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, object]:
    """Service cards, traffic metrics and the latest backend errors; ``down`` when the backend fails."""
    settings = get_settings()
    return await fetch_system_health(
        upstream,
        session.token,  # type: ignore[arg-type]
        error_limit=settings.system_health_error_limit,
        refresh_seconds=settings.system_health_refresh_seconds,
    )
