"""Claim workflows: list, claim, cancel, verify, copy.

Every mutation awaits the backend and then re-reads the authoritative list.
Nothing is patched locally: a failed call leaves the previous list untouched
and the ``UpstreamError`` propagates to the caller.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from talabahub.auth.session import SessionContext
from talabahub.claims import lifecycle
from talabahub.claims.lifecycle import ClaimStatus, CopyAcknowledgements
from talabahub.claims.schemas import (
    ClaimListResponse,
    ClaimStats,
    ClaimView,
    CopyCodeResponse,
    CountdownResponse,
    DiscountClaim,
    FilterOption,
    VerificationListResponse,
    VerificationStats,
    VerificationView,
)
from talabahub.config import get_settings
from talabahub.upstream.client import UpstreamClient
from talabahub.upstream.schemas import PageMetaResponse, page_items, page_meta

logger = structlog.get_logger()


class ClaimActionNotAllowed(ValueError):
    """The claim's current status does not offer the requested action."""


_copy_acks: CopyAcknowledgements | None = None


def get_copy_acks() -> CopyAcknowledgements:
    """Process-wide copy acknowledgement tracker (FastAPI dependency)."""
    global _copy_acks  # noqa: PLW0603
    if _copy_acks is None:
        _copy_acks = CopyAcknowledgements(window_seconds=get_settings().copy_ack_seconds)
    return _copy_acks


def reset_copy_acks() -> None:
    global _copy_acks  # noqa: PLW0603
    _copy_acks = None


def countdown_response(countdown: lifecycle.Countdown) -> CountdownResponse:
    return CountdownResponse(
        days=countdown.days,
        hours=countdown.hours,
        minutes=countdown.minutes,
        seconds=countdown.seconds,
        total_seconds=countdown.total_seconds,
        expired=countdown.expired,
        display=countdown.display(),
    )


def present_claim(
    claim: DiscountClaim,
    now: datetime,
    *,
    copied: bool = False,
) -> ClaimView:
    """Build the view of one claim from its backend status and ``now``.

    Only active claims carry a countdown, a QR code and the copy/cancel
    actions. When an active claim's countdown reaches zero the view flags
    ``display_expired`` but keeps the backend status.
    """
    settings = get_settings()
    countdown = lifecycle.claim_countdown(claim.status, claim.expires_at, now)
    is_active = claim.status == ClaimStatus.ACTIVE

    actions: list[str] = []
    if lifecycle.can_copy(claim.status):
        actions.append("copy_code")
    if lifecycle.can_cancel(claim.status):
        actions.append("cancel")
    discount = claim.discount
    if discount is not None:
        actions.append("view_discount")

    return ClaimView(
        id=claim.id,
        claim_code=claim.claim_code,
        status=claim.status,
        status_label=lifecycle.STATUS_LABELS[claim.status],
        status_variant=lifecycle.STATUS_VARIANTS[claim.status],
        discount_id=discount.id if discount else None,
        discount_title=discount.title if discount else "",
        brand_name=discount.brand.name if discount and discount.brand else "",
        discount_percent=discount.discount if discount else None,
        image_url=discount.image_url if discount else None,
        claimed_at=claim.claimed_at,
        expires_at=claim.expires_at,
        used_at=claim.used_at,
        saved_amount=claim.saved_amount,
        countdown=countdown_response(countdown) if countdown else None,
        valid_until=None if is_active else lifecycle.as_utc(claim.expires_at).date(),
        display_expired=bool(countdown and countdown.expired),
        qr_code_url=(
            lifecycle.qr_code_url(claim.claim_code, settings.qr_code_base_url, settings.qr_code_size)
            if is_active
            else None
        ),
        actions=actions,
        copied=copied and is_active,
    )


def claim_stats(claims: list[DiscountClaim], total: int) -> ClaimStats:
    return ClaimStats(
        active=sum(1 for c in claims if c.status == ClaimStatus.ACTIVE),
        used=sum(1 for c in claims if c.status == ClaimStatus.USED),
        expired=sum(1 for c in claims if c.status == ClaimStatus.EXPIRED),
        total=total,
    )


async def list_my_claims(
    upstream: UpstreamClient,
    session: SessionContext,
    *,
    page: int = 1,
    limit: int | None = None,
    status_filter: str = "all",
    copy_acks: CopyAcknowledgements | None = None,
    now: datetime | None = None,
) -> ClaimListResponse:
    """Current user's claims, one page, optionally filtered by status."""
    status_param = lifecycle.status_filter_param(status_filter)
    limit = limit or get_settings().claims_page_size
    payload = await upstream.get_my_claims(
        session.token,  # type: ignore[arg-type]
        {"page": page, "limit": limit, "status": status_param},
    )
    claims = [DiscountClaim.model_validate(item) for item in page_items(payload)]
    meta = page_meta(payload)
    now = now or datetime.now(timezone.utc)
    owner = session.user_id or session.token or ""

    views = [
        present_claim(
            claim,
            now,
            copied=bool(copy_acks and copy_acks.is_copied(owner, claim.id)),
        )
        for claim in claims
    ]
    return ClaimListResponse(
        claims=views,
        filters=[FilterOption(value=f, label=lifecycle.filter_label(f)) for f in lifecycle.STATUS_FILTERS],
        meta=PageMetaResponse.from_meta(meta),
        stats=claim_stats(claims, meta.total),
        status_filter=status_filter,
    )


async def get_claim(upstream: UpstreamClient, session: SessionContext, claim_id: str) -> DiscountClaim:
    payload = await upstream.get_claim(session.token, claim_id)  # type: ignore[arg-type]
    return DiscountClaim.model_validate(payload)


async def claim_discount(
    upstream: UpstreamClient,
    session: SessionContext,
    discount_id: str,
    *,
    page: int = 1,
    limit: int | None = None,
    status_filter: str = "all",
    copy_acks: CopyAcknowledgements | None = None,
) -> ClaimListResponse:
    """Claim a discount, then re-read the claim list."""
    created = await upstream.claim_discount(session.token, discount_id)  # type: ignore[arg-type]
    logger.info(
        "discount_claimed",
        discount_id=discount_id,
        claim_id=(created or {}).get("id"),
        user_id=session.user_id,
    )
    return await list_my_claims(
        upstream, session, page=page, limit=limit, status_filter=status_filter, copy_acks=copy_acks,
    )


async def cancel_claim(
    upstream: UpstreamClient,
    session: SessionContext,
    claim_id: str,
    *,
    page: int = 1,
    limit: int | None = None,
    status_filter: str = "all",
    copy_acks: CopyAcknowledgements | None = None,
) -> ClaimListResponse:
    """Cancel an active claim, then re-read the claim list.

    Raises ClaimActionNotAllowed without calling the cancel endpoint when
    the claim is not active.
    """
    current = await get_claim(upstream, session, claim_id)
    if not lifecycle.can_cancel(current.status):
        logger.info("claim_cancel_rejected", claim_id=claim_id, status=current.status.value)
        msg = f"Claim {claim_id} is {current.status.value}; only active claims can be cancelled"
        raise ClaimActionNotAllowed(msg)

    await upstream.cancel_claim(session.token, claim_id)  # type: ignore[arg-type]
    logger.info("claim_cancelled", claim_id=claim_id, user_id=session.user_id)
    return await list_my_claims(
        upstream, session, page=page, limit=limit, status_filter=status_filter, copy_acks=copy_acks,
    )


def present_verification(claim: DiscountClaim) -> VerificationView:
    user = claim.user
    student_name = f"{user.first_name} {user.last_name}".strip() if user else ""
    return VerificationView(
        id=claim.id,
        claim_code=claim.claim_code,
        status=claim.status,
        status_label=lifecycle.STATUS_LABELS[claim.status],
        status_variant=lifecycle.STATUS_VARIANTS[claim.status],
        student_name=student_name,
        student_email=user.email if user else None,
        discount_title=claim.discount.title if claim.discount else "",
        claimed_at=claim.claimed_at,
        expires_at=claim.expires_at,
        can_verify=claim.status not in lifecycle.TERMINAL_STATUSES,
    )


async def list_pending_verifications(
    upstream: UpstreamClient,
    session: SessionContext,
    *,
    page: int = 1,
    limit: int | None = None,
) -> VerificationListResponse:
    """Claims waiting for the partner's verification."""
    limit = limit or get_settings().verifications_page_size
    payload = await upstream.get_partner_pending_verifications(
        session.token,  # type: ignore[arg-type]
        {"page": page, "limit": limit},
    )
    claims = [DiscountClaim.model_validate(item) for item in page_items(payload)]
    meta = page_meta(payload)
    return VerificationListResponse(
        verifications=[present_verification(c) for c in claims],
        meta=PageMetaResponse.from_meta(meta),
        stats=VerificationStats(
            pending=meta.total,
            used=sum(1 for c in claims if c.status == ClaimStatus.USED),
            cancelled=sum(1 for c in claims if c.status == ClaimStatus.CANCELLED),
        ),
    )


async def verify_claim(
    upstream: UpstreamClient,
    session: SessionContext,
    claim_id: str,
    *,
    verified: bool,
    note: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> VerificationListResponse:
    """Partner verification: ``verified`` heads to used, otherwise cancelled.

    The new status is only shown after the backend accepts it and the
    verification list has been re-read.
    """
    await upstream.verify_claim(
        session.token,  # type: ignore[arg-type]
        claim_id,
        verified=verified,
        note=note or None,
    )
    logger.info("claim_verified", claim_id=claim_id, verified=verified, partner_id=session.user_id)
    return await list_pending_verifications(upstream, session, page=page, limit=limit)


async def copy_claim_code(
    upstream: UpstreamClient,
    session: SessionContext,
    claim_id: str,
    copy_acks: CopyAcknowledgements,
) -> CopyCodeResponse:
    """Hand out the code of an active claim and open the "copied" window.

    The claim itself is not changed.
    """
    claim = await get_claim(upstream, session, claim_id)
    if not lifecycle.can_copy(claim.status):
        msg = f"Claim {claim_id} is {claim.status.value}; only active claim codes can be copied"
        raise ClaimActionNotAllowed(msg)

    owner = session.user_id or session.token or ""
    ack_seconds = copy_acks.mark(owner, claim.id)
    return CopyCodeResponse(claim_id=claim.id, claim_code=claim.claim_code, ack_seconds=ack_seconds)
