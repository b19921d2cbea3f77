"""Admin fraud alert endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from talabahub.auth.dependencies import require_role
from talabahub.auth.session import SessionContext
from talabahub.fraud.schemas import FraudAlertListResponse, UpdateAlertStatusRequest
from talabahub.fraud.service import AlertActionNotAllowed, list_alerts, update_alert_status
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter(prefix="/api/v1/admin/fraud-alerts", tags=["Fraud"])

_STATUS_PATTERN = "^(all|new|investigating|resolved|dismissed)$"
_SEVERITY_PATTERN = "^(all|critical|high|medium|low)$"


@router.get("", response_model=FraudAlertListResponse)
async def fraud_alerts(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    status: str = Query("all", pattern=_STATUS_PATTERN),
    severity: str = Query("all", pattern=_SEVERITY_PATTERN),
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> FraudAlertListResponse:
    """Fraud alerts with status and severity filters."""
    return await list_alerts(
        upstream, session, page=page, limit=limit, status_filter=status, severity_filter=severity,
    )


@router.patch("/{alert_id}", response_model=FraudAlertListResponse)
async def update_status(
    alert_id: str,
    body: UpdateAlertStatusRequest,
    page: int = Query(1, ge=1),
    status: str = Query("all", pattern=_STATUS_PATTERN),
    severity: str = Query("all", pattern=_SEVERITY_PATTERN),
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> FraudAlertListResponse:
    """Investigate, resolve or dismiss an alert; returns the re-read list."""
    try:
        return await update_alert_status(
            upstream,
            session,
            alert_id,
            body.status,
            note=body.note,
            page=page,
            status_filter=status,
            severity_filter=severity,
        )
    except AlertActionNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
