"""Optional Redis connection used for the rate-limit counters.

The gateway keeps no other state in Redis, so it runs without one; callers
ask for ``optional_redis()`` and skip their Redis work on ``None``.
"""

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_client: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    logger.info("redis_configured", max_connections=max_connections)


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    client, _client = _client, None
    if client is not None:
        await client.aclose()


def set_redis(client: redis.Redis | None) -> None:
    """Install a pre-built client (tests install an in-memory stub)."""
    global _client  # noqa: PLW0603
    _client = client


def optional_redis() -> redis.Redis | None:
    """The configured client, or None when the gateway runs without Redis."""
    return _client
