"""Integration tests for the admin fraud alert and moderation endpoints."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from conftest import auth_headers

pytestmark = pytest.mark.asyncio

ADMIN = auth_headers(role="admin", sub="admin-1")


def make_alert(alert_id: str = "a1", status: str = "new", severity: str = "high") -> dict[str, Any]:
    return {
        "id": alert_id,
        "type": "multiple_accounts",
        "severity": severity,
        "status": status,
        "userId": "u1",
        "user": {"id": "u1", "firstName": "Jasur", "lastName": "Qodirov", "email": "jasur@example.uz"},
        "description": "Bir qurilmadan 4 ta akkaunt",
        "details": {"devices": ["abc", "def"], "count": 4},
        "createdAt": "2024-02-01T08:00:00Z",
    }


class TestFraudAlerts:
    async def test_list(self, client, backend):
        backend.add("GET", "/discounts/admin/fraud-alerts", {
            "data": [make_alert("a1", "new"), make_alert("a2", "resolved", "critical")],
            "meta": {"total": 9, "page": 1, "limit": 20, "totalPages": 1},
        })
        response = await client.get(
            "/api/v1/admin/fraud-alerts", params={"severity": "high"}, headers=ADMIN,
        )
        assert response.status_code == 200
        data = response.json()

        first, second = data["alerts"]
        assert first["severity_label"] == "Yuqori"
        assert first["status_label"] == "Yangi"
        assert first["type_label"] == "Ko'p akkauntlar"
        assert first["user_name"] == "Jasur Qodirov"
        assert first["details"] == {"devices": '["abc", "def"]', "count": "4"}
        assert first["actions"] == ["investigating", "resolved", "dismissed"]
        assert second["actions"] == []
        assert second["severity_label"] == "Kritik"

        assert data["stats"] == {"new": 1, "investigating": 0, "resolved": 1, "total": 9}
        assert dict(backend.calls[-1].url.params) == {"page": "1", "limit": "20", "severity": "high"}

    async def test_unknown_alert_type_keeps_list(self, client, backend):
        unknown = {**make_alert("a2"), "type": "card_testing"}
        backend.add("GET", "/discounts/admin/fraud-alerts", {
            "data": [make_alert("a1"), unknown],
            "meta": {"total": 2, "page": 1, "limit": 20, "totalPages": 1},
        })
        response = await client.get("/api/v1/admin/fraud-alerts", headers=ADMIN)
        assert response.status_code == 200
        labels = [(a["type"], a["type_label"]) for a in response.json()["alerts"]]
        assert labels == [("multiple_accounts", "Ko'p akkauntlar"), ("card_testing", "card_testing")]

    async def test_admin_only(self, client):
        response = await client.get("/api/v1/admin/fraud-alerts", headers=auth_headers(role="partner"))
        assert response.status_code == 403

    async def test_investigate_then_refetch(self, client, backend):
        state = {"status": "new"}

        @backend.route("GET", "/discounts/admin/fraud-alerts/a1")
        def _detail(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=make_alert("a1", state["status"]))

        @backend.route("PATCH", "/discounts/admin/fraud-alerts/a1")
        def _update(request: httpx.Request) -> httpx.Response:
            state["status"] = json.loads(request.content)["status"]
            return httpx.Response(200, json=make_alert("a1", state["status"]))

        @backend.route("GET", "/discounts/admin/fraud-alerts")
        def _list(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [make_alert("a1", state["status"])], "meta": {"total": 1}})

        response = await client.patch(
            "/api/v1/admin/fraud-alerts/a1",
            json={"status": "investigating", "note": "Tekshiryapman"},
            headers=ADMIN,
        )
        assert response.status_code == 200
        alert = response.json()["alerts"][0]
        assert alert["status"] == "investigating"
        assert alert["status_label"] == "Tekshirilmoqda"
        assert alert["actions"] == ["resolved", "dismissed"]

        update = next(r for r in backend.calls if r.method == "PATCH")
        assert json.loads(update.content) == {"status": "investigating", "note": "Tekshiryapman"}

    async def test_closed_alert_rejected_without_update(self, client, backend):
        backend.add("GET", "/discounts/admin/fraud-alerts/a1", make_alert("a1", "dismissed"))
        response = await client.patch(
            "/api/v1/admin/fraud-alerts/a1", json={"status": "resolved"}, headers=ADMIN,
        )
        assert response.status_code == 409
        assert backend.count("PATCH", "/discounts/admin/fraud-alerts/a1") == 0

    async def test_unknown_status_rejected(self, client):
        response = await client.patch(
            "/api/v1/admin/fraud-alerts/a1", json={"status": "closed"}, headers=ADMIN,
        )
        assert response.status_code == 422


class TestModeration:
    async def test_pending_courses(self, client, backend):
        backend.add("GET", "/courses/admin/pending", {
            "data": [{"id": "k1", "title": "Python asoslari"}],
            "meta": {"total": 1, "page": 1, "limit": 20, "totalPages": 1},
        })
        response = await client.get("/api/v1/admin/moderation/course", headers=ADMIN)
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "course"
        assert data["items"][0]["title"] == "Python asoslari"
        assert data["meta"]["total"] == 1

    async def test_unknown_kind(self, client):
        response = await client.get("/api/v1/admin/moderation/job", headers=ADMIN)
        assert response.status_code == 422

    async def test_approve_then_refetch(self, client, backend):
        backend.add("PATCH", "/discounts/d1/approve", {"id": "d1", "status": "approved"})
        backend.add("GET", "/discounts/admin/pending", {"data": [], "meta": {"total": 0}})

        response = await client.post(
            "/api/v1/admin/moderation/discount/d1/approve", json={}, headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["items"] == []
        assert [r.method for r in backend.calls] == ["PATCH", "GET"]

    async def test_reject_requires_reason(self, client, backend):
        response = await client.post(
            "/api/v1/admin/moderation/article/p1/reject", json={"reason": "   "}, headers=ADMIN,
        )
        assert response.status_code == 422
        assert backend.calls == []

    async def test_reject_sends_trimmed_reason(self, client, backend):
        backend.add("PATCH", "/articles/p1/reject", {"id": "p1"})
        backend.add("GET", "/articles/admin/pending", {"data": [], "meta": {"total": 0}})

        response = await client.post(
            "/api/v1/admin/moderation/article/p1/reject",
            json={"reason": "  Plagiat  "},
            headers=ADMIN,
        )
        assert response.status_code == 200
        reject_call = next(r for r in backend.calls if r.method == "PATCH")
        assert json.loads(reject_call.content) == {"reason": "Plagiat"}
