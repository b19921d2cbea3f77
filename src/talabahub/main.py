"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from talabahub.articles.router import router as articles_router
from talabahub.auth.router import router as auth_router
from talabahub.claims.router import router as claims_router
from talabahub.config import get_settings
from talabahub.export.router import router as export_router
from talabahub.feed.router import router as feed_router
from talabahub.fraud.router import router as fraud_router
from talabahub.health.monitor import UpstreamHealthMonitor, set_monitor
from talabahub.health.router import router as health_router
from talabahub.listings.router import router as listings_router
from talabahub.middleware import setup_middleware
from talabahub.moderation.router import router as moderation_router
from talabahub.redis_client import close_redis, init_redis
from talabahub.upstream.client import close_upstream, get_upstream, init_upstream
from talabahub.ws.router import router as ws_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_upstream(settings.upstream_url, settings.upstream_timeout_seconds)
    if settings.redis_url:
        await init_redis(settings.redis_url, settings.redis_max_connections)

    # Poll the backend health probes in the background
    monitor = UpstreamHealthMonitor(get_upstream(), settings.health_poll_interval_seconds)
    set_monitor(monitor)
    if settings.health_poll_enabled:
        monitor.start()
    logger.info("gateway_started", upstream=settings.upstream_url, environment=settings.environment)

    yield

    await monitor.stop()
    set_monitor(None)
    await close_upstream()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TalabaHub Gateway",
        description="Backend-for-frontend for TalabaHub: discount claims, search feed and CSV export",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(claims_router)
    app.include_router(feed_router)
    app.include_router(listings_router)
    app.include_router(export_router)
    app.include_router(articles_router)
    app.include_router(fraud_router)
    app.include_router(moderation_router)
    app.include_router(ws_router)

    return app


app = create_app()
