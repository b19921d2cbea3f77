"""Admin moderation endpoints."""

from fastapi import APIRouter, Depends, Path, Query

from talabahub.auth.dependencies import require_role
from talabahub.auth.session import SessionContext
from talabahub.moderation.service import (
    ApproveRequest,
    PendingContentResponse,
    RejectRequest,
    approve,
    list_pending,
    reject,
)
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter(prefix="/api/v1/admin/moderation", tags=["Moderation"])

_KIND_PATTERN = "^(discount|article|course)$"


@router.get("/{kind}", response_model=PendingContentResponse)
async def pending(
    kind: str = Path(..., pattern=_KIND_PATTERN),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> PendingContentResponse:
    """Items of ``kind`` waiting for approval."""
    return await list_pending(upstream, session, kind, page=page, limit=limit)


@router.post("/{kind}/{item_id}/approve", response_model=PendingContentResponse)
async def approve_item(
    item_id: str,
    body: ApproveRequest,
    kind: str = Path(..., pattern=_KIND_PATTERN),
    page: int = Query(1, ge=1),
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> PendingContentResponse:
    return await approve(upstream, session, kind, item_id, body.note, page=page)


@router.post("/{kind}/{item_id}/reject", response_model=PendingContentResponse)
async def reject_item(
    item_id: str,
    body: RejectRequest,
    kind: str = Path(..., pattern=_KIND_PATTERN),
    page: int = Query(1, ge=1),
    session: SessionContext = Depends(require_role("admin")),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> PendingContentResponse:
    """Reject with a mandatory, non-blank reason."""
    return await reject(upstream, session, kind, item_id, body.reason, page=page)
