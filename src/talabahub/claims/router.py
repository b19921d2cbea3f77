"""Claim endpoints: my claims, claim, cancel, copy, partner verification."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from talabahub.auth.dependencies import require_role, require_session
from talabahub.auth.session import SessionContext
from talabahub.claims.lifecycle import CopyAcknowledgements
from talabahub.claims.schemas import (
    ClaimListResponse,
    ClaimView,
    CopyCodeResponse,
    VerificationListResponse,
    VerifyClaimRequest,
)
from talabahub.claims.service import (
    ClaimActionNotAllowed,
    cancel_claim,
    claim_discount,
    copy_claim_code,
    get_claim,
    get_copy_acks,
    list_my_claims,
    list_pending_verifications,
    present_claim,
    verify_claim,
)
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter(prefix="/api/v1/claims", tags=["Claims"])

_STATUS_PATTERN = "^(all|active|pending|used|expired|cancelled)$"


class ClaimDiscountRequest(BaseModel):
    discount_id: str


@router.get("", response_model=ClaimListResponse)
async def my_claims(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    status: str = Query("all", pattern=_STATUS_PATTERN),
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
    copy_acks: CopyAcknowledgements = Depends(get_copy_acks),  # noqa: B008
) -> ClaimListResponse:
    """Current user's claims with status badges, countdowns and page stats."""
    return await list_my_claims(
        upstream, session, page=page, limit=limit, status_filter=status, copy_acks=copy_acks,
    )


@router.post("", response_model=ClaimListResponse, status_code=201)
async def create_claim(
    body: ClaimDiscountRequest,
    session: SessionContext = Depends(require_role("student")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
    copy_acks: CopyAcknowledgements = Depends(get_copy_acks),  # noqa: B008
) -> ClaimListResponse:
    """Claim a discount; returns the re-read claim list."""
    return await claim_discount(upstream, session, body.discount_id, copy_acks=copy_acks)


@router.get("/verifications", response_model=VerificationListResponse)
async def pending_verifications(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: SessionContext = Depends(require_role("partner")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> VerificationListResponse:
    """Claims waiting for the partner's verification."""
    return await list_pending_verifications(upstream, session, page=page, limit=limit)


@router.get("/{claim_id}", response_model=ClaimView)
async def claim_detail(
    claim_id: str,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
    copy_acks: CopyAcknowledgements = Depends(get_copy_acks),  # noqa: B008
) -> ClaimView:
    claim = await get_claim(upstream, session, claim_id)
    owner = session.user_id or session.token or ""
    return present_claim(claim, datetime.now(timezone.utc), copied=copy_acks.is_copied(owner, claim.id))


@router.post("/{claim_id}/cancel", response_model=ClaimListResponse)
async def cancel(
    claim_id: str,
    page: int = Query(1, ge=1),
    status: str = Query("all", pattern=_STATUS_PATTERN),
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
    copy_acks: CopyAcknowledgements = Depends(get_copy_acks),  # noqa: B008
) -> ClaimListResponse:
    """Cancel an active claim; returns the re-read claim list."""
    try:
        return await cancel_claim(
            upstream, session, claim_id, page=page, status_filter=status, copy_acks=copy_acks,
        )
    except ClaimActionNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.post("/{claim_id}/copy", response_model=CopyCodeResponse)
async def copy_code(
    claim_id: str,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
    copy_acks: CopyAcknowledgements = Depends(get_copy_acks),  # noqa: B008
) -> CopyCodeResponse:
    """Return the claim code and show the "copied" state for a short window."""
    try:
        return await copy_claim_code(upstream, session, claim_id, copy_acks)
    except ClaimActionNotAllowed as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.post("/{claim_id}/verify", response_model=VerificationListResponse)
async def verify(
    claim_id: str,
    body: VerifyClaimRequest,
    page: int = Query(1, ge=1),
    session: SessionContext = Depends(require_role("partner")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> VerificationListResponse:
    """Confirm or reject a claim at the point of sale; returns the re-read list."""
    return await verify_claim(
        upstream, session, claim_id, verified=body.verified, note=body.note, page=page,
    )
