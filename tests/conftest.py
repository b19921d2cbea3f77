"""Shared test fixtures.

The REST backend is replaced by ``FakeBackend`` behind ``httpx.MockTransport``;
HTTP tests go through ``ASGITransport``, WebSocket tests through Starlette's
``TestClient``.
"""

from __future__ import annotations

import os
import time
from collections.abc import AsyncGenerator, Callable, Iterator
from typing import Any

import httpx
import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("TALABAHUB_HEALTH_POLL_ENABLED", "false")
os.environ.setdefault("TALABAHUB_LOG_FORMAT", "console")

from talabahub.claims.service import reset_copy_acks  # noqa: E402
from talabahub.config import get_settings  # noqa: E402
from talabahub.health.monitor import UpstreamHealthMonitor, set_monitor  # noqa: E402
from talabahub.main import create_app  # noqa: E402
from talabahub.redis_client import set_redis  # noqa: E402
from talabahub.upstream.client import UpstreamClient, set_upstream  # noqa: E402

BACKEND_URL = "http://backend.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Route table keyed by (method, path below /api); records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:  # noqa: ANN401
        def _respond(_request: httpx.Request) -> httpx.Response:
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        self.routes[(method, path)] = _respond

    def route(self, method: str, path: str) -> Callable[[Handler], Handler]:
        """Decorator form for stateful handlers."""

        def _register(handler: Handler) -> Handler:
            self.routes[(method, path)] = handler
            return handler

        return _register

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.removeprefix("/api")
        handler = self.routes.get((request.method, path))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        return handler(request)

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for r in self.calls
            if r.method == method and r.url.path.removeprefix("/api") == path
        )


def make_token(sub: str = "user-1", role: str | None = "student", expires_in: int = 3600) -> str:
    payload: dict[str, Any] = {"sub": sub, "exp": int(time.time()) + expires_in}
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, "test-secret", algorithm="HS256")


def auth_headers(role: str | None = "student", sub: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub=sub, role=role)}"}


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    reset_copy_acks()
    yield
    get_settings.cache_clear()
    reset_copy_acks()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def upstream(backend: FakeBackend) -> Iterator[UpstreamClient]:
    client = UpstreamClient(
        httpx.AsyncClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handle)),
    )
    set_upstream(client)
    monitor = UpstreamHealthMonitor(client, interval=0.05)
    set_monitor(monitor)
    yield client
    set_monitor(None)
    set_upstream(None)
    set_redis(None)


@pytest_asyncio.fixture
async def client(upstream: UpstreamClient) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app; the lifespan is replaced by the fixtures above."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
