"""Fraud alert Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from talabahub.fraud.alerts import AlertSeverity, AlertStatus
from talabahub.upstream.schemas import PageMetaResponse, UpstreamModel


class AlertUser(UpstreamModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None


class FraudAlert(UpstreamModel):
    id: str
    type: str
    severity: AlertSeverity
    status: AlertStatus
    user_id: str | None = None
    user: AlertUser | None = None
    description: str = ""
    details: dict[str, Any] = {}
    created_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None


class FraudAlertView(BaseModel):
    id: str
    type: str
    type_label: str
    severity: AlertSeverity
    severity_label: str
    severity_variant: str
    status: AlertStatus
    status_label: str
    status_variant: str
    user_name: str = ""
    user_email: str | None = None
    description: str = ""
    details: dict[str, str] = {}
    created_at: datetime
    resolved_at: datetime | None = None
    actions: list[AlertStatus] = []


class FraudAlertStats(BaseModel):
    new: int = 0
    investigating: int = 0
    resolved: int = 0
    total: int = 0


class FraudAlertListResponse(BaseModel):
    alerts: list[FraudAlertView]
    meta: PageMetaResponse
    stats: FraudAlertStats
    status_filter: str = "all"
    severity_filter: str = "all"


class UpdateAlertStatusRequest(BaseModel):
    status: AlertStatus
    note: str | None = Field(None, max_length=1000)
