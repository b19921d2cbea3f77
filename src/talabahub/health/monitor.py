"""Background poller for the backend health probes.

Polls health, readiness, liveness and metrics together on a fixed interval.
A failed round keeps the previous probe results and records the error.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import structlog

from talabahub.upstream.client import UpstreamClient
from talabahub.upstream.errors import UpstreamError, UpstreamUnavailable

logger = structlog.get_logger()

STATUS_BADGES: dict[str, tuple[str, str]] = {
    "ok": ("Ishlayapti", "success"),
    "error": ("Xatolik", "danger"),
    "shutting_down": ("O'chmoqda", "warning"),
}

_BYTE_UNITS = ("B", "KB", "MB", "GB")


def format_bytes(num_bytes: float) -> str:
    """``1536`` -> ``"1.5 KB"``; two decimals at most, capped at GB."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(_BYTE_UNITS) - 1:
        value /= 1024
        i += 1
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[i]}"


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    return f"{seconds // 86400}d {(seconds % 86400) // 3600}h {(seconds % 3600) // 60}m"


def status_badge(status: str | None) -> dict[str, str]:
    label, variant = STATUS_BADGES.get(status or "", (status or "", "info"))
    return {"label": label, "variant": variant}


def _probe_view(probe: dict[str, Any] | None) -> dict[str, Any] | None:
    if probe is None:
        return None
    return {**probe, "badge": status_badge(probe.get("status"))}


def _metrics_view(metrics: dict[str, Any] | None) -> dict[str, Any] | None:
    if metrics is None:
        return None
    memory = metrics.get("memory") or {}
    view = dict(metrics)
    view["memory_formatted"] = {k: format_bytes(v) for k, v in memory.items() if isinstance(v, (int, float))}
    heap_total = memory.get("heapTotal") or 0
    if heap_total:
        view["heap_used_percent"] = round((memory.get("heapUsed") or 0) / heap_total * 100, 1)
    if "uptime" in metrics:
        view["uptime_formatted"] = format_uptime(metrics.get("uptime") or 0)
    return view


class UpstreamHealthMonitor:
    """Polls the four backend probes until stopped."""

    def __init__(self, upstream: UpstreamClient, interval: float = 10.0) -> None:
        self.upstream = upstream
        self.interval = interval
        self.health: dict[str, Any] | None = None
        self.readiness: dict[str, Any] | None = None
        self.liveness: dict[str, Any] | None = None
        self.metrics: dict[str, Any] | None = None
        self.checked_at: datetime | None = None
        self.error: str | None = None
        self._task: asyncio.Task[None] | None = None

    async def poll_once(self) -> None:
        """One round; all four probes must answer for the snapshot to update."""
        try:
            health, ready, live, metrics = await asyncio.gather(
                self.upstream.get_health(),
                self.upstream.get_health_ready(),
                self.upstream.get_health_live(),
                self.upstream.get_health_metrics(),
            )
        except (UpstreamError, UpstreamUnavailable) as exc:
            self.error = str(exc) or exc.__class__.__name__
            logger.warning("health_poll_failed", error=self.error)
            return
        self.health, self.readiness, self.liveness, self.metrics = health, ready, live, metrics
        self.checked_at = datetime.now(timezone.utc)
        self.error = None

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as exc:
                self.error = str(exc) or exc.__class__.__name__
                logger.exception("health_poll_crashed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            logger.info("health_monitor_started", interval=self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("health_monitor_stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> dict[str, Any]:
        return {
            "health": _probe_view(self.health),
            "readiness": _probe_view(self.readiness),
            "liveness": _probe_view(self.liveness),
            "metrics": _metrics_view(self.metrics),
            "checked_at": self.checked_at.isoformat() if self.checked_at else None,
            "error": self.error,
            "polling": self.running,
            "interval_seconds": self.interval,
        }


_monitor: UpstreamHealthMonitor | None = None


def set_monitor(monitor: UpstreamHealthMonitor | None) -> None:
    global _monitor  # noqa: PLW0603
    _monitor = monitor


def get_monitor() -> UpstreamHealthMonitor:
    """Get the health monitor (FastAPI dependency)."""
    if _monitor is None:
        msg = "Health monitor not initialized."
        raise RuntimeError(msg)
    return _monitor
