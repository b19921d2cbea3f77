"""Unit tests for the backend REST client."""

from __future__ import annotations

import json

import httpx
import pytest

from talabahub.upstream.client import UpstreamClient
from talabahub.upstream.errors import UpstreamError, UpstreamUnavailable

pytestmark = pytest.mark.asyncio


class TestRequest:
    async def test_bearer_token_and_params(self, backend, upstream):
        backend.add("GET", "/discounts/claims/my", {"data": [], "meta": {"total": 0}})
        await upstream.get_my_claims("tok-1", {"page": 2, "limit": 10, "status": None})

        request = backend.calls[-1]
        assert request.headers["Authorization"] == "Bearer tok-1"
        assert dict(request.url.params) == {"page": "2", "limit": "10"}

    async def test_anonymous_request_has_no_auth_header(self, backend, upstream):
        backend.add("GET", "/search", {"discounts": {"total": 0, "results": []}})
        await upstream.search("kofe", 5)
        assert "Authorization" not in backend.calls[-1].headers

    async def test_json_body(self, backend, upstream):
        backend.add("POST", "/discounts/claims/c1/verify", {"ok": True})
        await upstream.verify_claim("tok", "c1", verified=False, note="Soxta kod")
        assert json.loads(backend.calls[-1].content) == {"verified": False, "note": "Soxta kod"}

    async def test_empty_body_returns_none(self, backend, upstream):
        backend.add("PATCH", "/discounts/claims/c1/cancel", None, status=204)
        assert await upstream.cancel_claim("tok", "c1") is None

    async def test_error_carries_backend_message(self, backend, upstream):
        backend.add("GET", "/discounts/claims/c9", {"message": "Claim not found"}, status=404)
        with pytest.raises(UpstreamError) as exc_info:
            await upstream.get_claim("tok", "c9")
        assert exc_info.value.status == 404
        assert exc_info.value.message == "Claim not found"

    async def test_validation_messages_joined(self, backend, upstream):
        backend.add("POST", "/articles/drafts", {"message": ["title must be a string", "tags too long"]}, status=400)
        with pytest.raises(UpstreamError, match="title must be a string; tags too long"):
            await upstream.create_article_draft("tok", {})

    async def test_non_json_error_uses_default_message(self, backend, upstream):
        backend.routes[("GET", "/health")] = lambda _r: httpx.Response(500, text="<html>oops</html>")
        with pytest.raises(UpstreamError) as exc_info:
            await upstream.get_health()
        assert exc_info.value.status == 500
        assert exc_info.value.message == "An error occurred"

    async def test_transport_error_is_unavailable(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = UpstreamClient(
            httpx.AsyncClient(base_url="http://backend.test/api", transport=httpx.MockTransport(refuse)),
        )
        with pytest.raises(UpstreamUnavailable):
            await client.get_health_live()
        await client.aclose()

    async def test_moderation_paths(self, backend, upstream):
        backend.add("PATCH", "/courses/k1/reject", {"ok": True})
        await upstream.reject_content("tok", "course", "k1", "Sifatsiz")
        assert backend.count("PATCH", "/courses/k1/reject") == 1
        assert json.loads(backend.calls[-1].content) == {"reason": "Sifatsiz"}

    async def test_non_json_success_body_is_upstream_error(self, backend, upstream):
        backend.routes[("GET", "/health")] = lambda _r: httpx.Response(200, text="<html>proxy</html>")
        with pytest.raises(UpstreamError) as exc_info:
            await upstream.get_health()
        assert exc_info.value.status == 200
        assert exc_info.value.message == "An error occurred"
        assert exc_info.value.payload == "<html>proxy</html>"
