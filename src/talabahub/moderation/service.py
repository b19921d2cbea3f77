"""Approve or reject partner-submitted content (discounts, articles, courses)."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, Field, field_validator

from talabahub.auth.session import SessionContext
from talabahub.config import get_settings
from talabahub.upstream.client import MODERATED_KINDS, UpstreamClient
from talabahub.upstream.schemas import PageMetaResponse, page_items, page_meta

logger = structlog.get_logger()

KINDS: tuple[str, ...] = tuple(MODERATED_KINDS)


class ApproveRequest(BaseModel):
    note: str | None = Field(None, max_length=1000)


class RejectRequest(BaseModel):
    reason: str = Field(..., max_length=1000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "A rejection reason is required"
            raise ValueError(msg)
        return v


class PendingContentResponse(BaseModel):
    kind: str
    items: list[dict[str, Any]]
    meta: PageMetaResponse


def _check_kind(kind: str) -> None:
    if kind not in MODERATED_KINDS:
        msg = f"Unknown content kind: {kind}"
        raise ValueError(msg)


async def list_pending(
    upstream: UpstreamClient,
    session: SessionContext,
    kind: str,
    *,
    page: int = 1,
    limit: int | None = None,
) -> PendingContentResponse:
    _check_kind(kind)
    limit = limit or get_settings().moderation_page_size
    payload = await upstream.get_pending_content(
        session.token,  # type: ignore[arg-type]
        kind,
        {"page": page, "limit": limit},
    )
    return PendingContentResponse(
        kind=kind,
        items=page_items(payload),
        meta=PageMetaResponse.from_meta(page_meta(payload)),
    )


async def approve(
    upstream: UpstreamClient,
    session: SessionContext,
    kind: str,
    item_id: str,
    note: str | None = None,
    *,
    page: int = 1,
) -> PendingContentResponse:
    """Approve an item, then re-read the pending list."""
    _check_kind(kind)
    await upstream.approve_content(session.token, kind, item_id, note or None)  # type: ignore[arg-type]
    logger.info("content_approved", kind=kind, item_id=item_id, admin_id=session.user_id)
    return await list_pending(upstream, session, kind, page=page)


async def reject(
    upstream: UpstreamClient,
    session: SessionContext,
    kind: str,
    item_id: str,
    reason: str,
    *,
    page: int = 1,
) -> PendingContentResponse:
    """Reject an item with a reason, then re-read the pending list."""
    _check_kind(kind)
    reason = reason.strip()
    if not reason:
        msg = "A rejection reason is required"
        raise ValueError(msg)
    await upstream.reject_content(session.token, kind, item_id, reason)  # type: ignore[arg-type]
    logger.info("content_rejected", kind=kind, item_id=item_id, admin_id=session.user_id)
    return await list_pending(upstream, session, kind, page=page)
