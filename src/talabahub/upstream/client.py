"""Async client for the TalabaHub REST backend.

The backend is an external collaborator. Every call is awaited and either
returns the decoded JSON body or raises ``UpstreamError``; nothing here
retries or patches results locally.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from talabahub.upstream.errors import DEFAULT_ERROR_MESSAGE, UpstreamError, UpstreamUnavailable

logger = structlog.get_logger()

# Moderated content kinds -> backend collection prefix
MODERATED_KINDS: dict[str, str] = {
    "discount": "/discounts",
    "article": "/articles",
    "course": "/courses",
}


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop unset query parameters so they never reach the backend as 'None'."""
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _error_message(body: Any) -> str:  # noqa: ANN401
    if not isinstance(body, dict):
        return DEFAULT_ERROR_MESSAGE
    message = body.get("message")
    if isinstance(message, list):
        # class-validator style: list of field messages
        return "; ".join(str(m) for m in message) or DEFAULT_ERROR_MESSAGE
    return str(message) if message else DEFAULT_ERROR_MESSAGE


class UpstreamClient:
    """Thin typed wrapper over ``httpx.AsyncClient`` bound to the backend base URL."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """Send one request; raise ``UpstreamError`` on a non-2xx reply or a body that is not JSON."""
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.warning("upstream_unreachable", method=method, path=path, error=str(exc))
            raise UpstreamUnavailable(str(exc)) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {"message": DEFAULT_ERROR_MESSAGE}
            logger.info(
                "upstream_error",
                method=method,
                path=path,
                status=response.status_code,
            )
            raise UpstreamError(response.status_code, _error_message(body), body)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("upstream_invalid_body", method=method, path=path, status=response.status_code)
            raise UpstreamError(response.status_code, DEFAULT_ERROR_MESSAGE, response.text) from exc

    # --- Auth ---

    async def logout(self, token: str) -> Any:  # noqa: ANN401
        return await self.request("POST", "/auth/logout", token=token)

    # --- Listings ---

    async def list_resource(
        self, resource: str, params: dict[str, Any] | None = None, token: str | None = None,
    ) -> dict[str, Any]:
        """GET a paginated collection, e.g. ``/discounts`` or ``/jobs``."""
        return await self.request("GET", f"/{resource}", token=token, params=params)

    # --- Discount claims ---

    async def get_my_claims(self, token: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", "/discounts/claims/my", token=token, params=params)

    async def get_claim(self, token: str, claim_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/discounts/claims/{claim_id}", token=token)

    async def claim_discount(self, token: str, discount_id: str) -> dict[str, Any]:
        return await self.request("POST", f"/discounts/{discount_id}/claim", token=token)

    async def cancel_claim(self, token: str, claim_id: str) -> Any:  # noqa: ANN401
        return await self.request("PATCH", f"/discounts/claims/{claim_id}/cancel", token=token)

    async def verify_claim(
        self, token: str, claim_id: str, *, verified: bool, note: str | None = None,
    ) -> Any:  # noqa: ANN401
        body: dict[str, Any] = {"verified": verified}
        if note:
            body["note"] = note
        return await self.request("POST", f"/discounts/claims/{claim_id}/verify", token=token, json=body)

    async def get_partner_pending_verifications(
        self, token: str, params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self.request("GET", "/discounts/partner/verifications", token=token, params=params)

    # --- Fraud alerts ---

    async def get_fraud_alerts(self, token: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", "/discounts/admin/fraud-alerts", token=token, params=params)

    async def get_fraud_alert(self, token: str, alert_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/discounts/admin/fraud-alerts/{alert_id}", token=token)

    async def update_fraud_alert_status(
        self, token: str, alert_id: str, status: str, note: str | None = None,
    ) -> Any:  # noqa: ANN401
        body: dict[str, Any] = {"status": status}
        if note:
            body["note"] = note
        return await self.request(
            "PATCH", f"/discounts/admin/fraud-alerts/{alert_id}", token=token, json=body,
        )

    # --- Moderation ---

    async def get_pending_content(
        self, token: str, kind: str, params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        prefix = MODERATED_KINDS[kind]
        return await self.request("GET", f"{prefix}/admin/pending", token=token, params=params)

    async def approve_content(
        self, token: str, kind: str, item_id: str, note: str | None = None,
    ) -> Any:  # noqa: ANN401
        prefix = MODERATED_KINDS[kind]
        body = {"note": note} if note else None
        return await self.request("PATCH", f"{prefix}/{item_id}/approve", token=token, json=body)

    async def reject_content(self, token: str, kind: str, item_id: str, reason: str) -> Any:  # noqa: ANN401
        prefix = MODERATED_KINDS[kind]
        return await self.request(
            "PATCH", f"{prefix}/{item_id}/reject", token=token, json={"reason": reason},
        )

    # --- Search ---

    async def search(self, query: str, limit: int = 20) -> dict[str, Any]:
        return await self.request("GET", "/search", params={"query": query, "limit": limit})

    async def search_suggestions(self, query: str, limit: int = 5) -> Any:  # noqa: ANN401
        return await self.request("GET", "/search/suggestions", params={"query": query, "limit": limit})

    # --- Health probes ---

    async def get_health(self) -> dict[str, Any]:
        return await self.request("GET", "/health")

    async def get_health_ready(self) -> dict[str, Any]:
        return await self.request("GET", "/health/ready")

    async def get_health_live(self) -> dict[str, Any]:
        return await self.request("GET", "/health/live")

    async def get_health_metrics(self) -> dict[str, Any]:
        return await self.request("GET", "/health/metrics")

    async def get_health_services(self, token: str) -> dict[str, Any]:
        return await self.request("GET", "/health/services", token=token)

    async def get_health_errors(self, token: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", "/health/errors", token=token, params=params)

    # --- Article drafts ---

    async def get_my_article_drafts(self, token: str) -> list[dict[str, Any]]:
        return await self.request("GET", "/articles/drafts/my", token=token)

    async def get_article_draft(self, token: str, draft_id: str) -> dict[str, Any]:
        return await self.request("GET", f"/articles/drafts/{draft_id}", token=token)

    async def create_article_draft(self, token: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.request("POST", "/articles/drafts", token=token, json=data)

    async def update_article_draft(self, token: str, draft_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return await self.request("PATCH", f"/articles/drafts/{draft_id}", token=token, json=data)

    async def delete_article_draft(self, token: str, draft_id: str) -> Any:  # noqa: ANN401
        return await self.request("DELETE", f"/articles/drafts/{draft_id}", token=token)

    async def publish_article(self, token: str, draft_id: str) -> dict[str, Any]:
        return await self.request("POST", f"/articles/drafts/{draft_id}/publish", token=token)


_client: UpstreamClient | None = None


async def init_upstream(base_url: str, timeout: float = 10.0) -> None:
    """Create the shared backend client."""
    global _client  # noqa: PLW0603
    _client = UpstreamClient(httpx.AsyncClient(base_url=base_url, timeout=timeout))


async def close_upstream() -> None:
    """Close the shared backend client."""
    global _client  # noqa: PLW0603
    if _client:
        await _client.aclose()
        _client = None


def set_upstream(client: UpstreamClient | None) -> None:
    """Install a pre-built client (tests wire one over ``httpx.MockTransport``)."""
    global _client  # noqa: PLW0603
    _client = client


def get_upstream() -> UpstreamClient:
    """Get the backend client (FastAPI dependency)."""
    if _client is None:
        msg = "Upstream client not initialized. Call init_upstream() first."
        raise RuntimeError(msg)
    return _client
