"""Fraud alert review for admins."""

from __future__ import annotations

import json

import structlog

from talabahub.auth.session import SessionContext
from talabahub.config import get_settings
from talabahub.fraud import alerts
from talabahub.fraud.alerts import AlertStatus
from talabahub.fraud.schemas import (
    FraudAlert,
    FraudAlertListResponse,
    FraudAlertStats,
    FraudAlertView,
)
from talabahub.upstream.client import UpstreamClient
from talabahub.upstream.schemas import PageMetaResponse, page_items, page_meta

logger = structlog.get_logger()


class AlertActionNotAllowed(ValueError):
    """The alert's status does not offer the requested change."""


def _detail_text(value: object) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def present_alert(alert: FraudAlert) -> FraudAlertView:
    user = alert.user
    return FraudAlertView(
        id=alert.id,
        type=alert.type,
        type_label=alerts.type_label(alert.type),
        severity=alert.severity,
        severity_label=alerts.SEVERITY_LABELS[alert.severity],
        severity_variant=alerts.SEVERITY_VARIANTS[alert.severity],
        status=alert.status,
        status_label=alerts.STATUS_LABELS[alert.status],
        status_variant=alerts.STATUS_VARIANTS[alert.status],
        user_name=f"{user.first_name} {user.last_name}".strip() if user else "",
        user_email=user.email if user else None,
        description=alert.description,
        details={k: _detail_text(v) for k, v in alert.details.items()},
        created_at=alert.created_at,
        resolved_at=alert.resolved_at,
        actions=alerts.available_actions(alert.status),
    )


async def list_alerts(
    upstream: UpstreamClient,
    session: SessionContext,
    *,
    page: int = 1,
    limit: int | None = None,
    status_filter: str = "all",
    severity_filter: str = "all",
) -> FraudAlertListResponse:
    limit = limit or get_settings().moderation_page_size
    payload = await upstream.get_fraud_alerts(
        session.token,  # type: ignore[arg-type]
        {
            "page": page,
            "limit": limit,
            "status": alerts.filter_param(status_filter),
            "severity": alerts.filter_param(severity_filter),
        },
    )
    items = [FraudAlert.model_validate(item) for item in page_items(payload)]
    meta = page_meta(payload)
    return FraudAlertListResponse(
        alerts=[present_alert(a) for a in items],
        meta=PageMetaResponse.from_meta(meta),
        stats=FraudAlertStats(
            new=sum(1 for a in items if a.status == AlertStatus.NEW),
            investigating=sum(1 for a in items if a.status == AlertStatus.INVESTIGATING),
            resolved=sum(1 for a in items if a.status == AlertStatus.RESOLVED),
            total=meta.total,
        ),
        status_filter=status_filter,
        severity_filter=severity_filter,
    )


async def update_alert_status(
    upstream: UpstreamClient,
    session: SessionContext,
    alert_id: str,
    status: AlertStatus,
    *,
    note: str | None = None,
    page: int = 1,
    status_filter: str = "all",
    severity_filter: str = "all",
) -> FraudAlertListResponse:
    """Move an alert to ``status`` and re-read the list.

    Closed alerts (resolved or dismissed) are rejected before the update call.
    """
    current = FraudAlert.model_validate(
        await upstream.get_fraud_alert(session.token, alert_id),  # type: ignore[arg-type]
    )
    try:
        alerts.validate_transition(current.status, status)
    except ValueError as e:
        logger.info(
            "fraud_alert_update_rejected",
            alert_id=alert_id,
            current=current.status.value,
            target=status.value,
        )
        raise AlertActionNotAllowed(str(e)) from e

    await upstream.update_fraud_alert_status(
        session.token,  # type: ignore[arg-type]
        alert_id,
        status.value,
        note or None,
    )
    logger.info("fraud_alert_updated", alert_id=alert_id, status=status.value, admin_id=session.user_id)
    return await list_alerts(
        upstream,
        session,
        page=page,
        status_filter=status_filter,
        severity_filter=severity_filter,
    )
