"""Article draft endpoints for authors."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from talabahub.articles.schemas import DraftInput, DraftView
from talabahub.articles.service import (
    DraftIncomplete,
    delete_draft,
    get_draft,
    list_drafts,
    publish,
    save_draft,
)
from talabahub.auth.dependencies import require_session
from talabahub.auth.session import SessionContext
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter(prefix="/api/v1/articles/drafts", tags=["Articles"])


@router.get("", response_model=list[DraftView])
async def my_drafts(
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> list[DraftView]:
    return await list_drafts(upstream, session)


@router.post("", response_model=DraftView, status_code=201)
async def create_draft(
    body: DraftInput,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> DraftView:
    try:
        return await save_draft(upstream, session, body)
    except DraftIncomplete as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/publish")
async def publish_new(
    body: DraftInput,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, Any]:
    """Create a draft from the form and publish it straight away."""
    try:
        return await publish(upstream, session, body)
    except DraftIncomplete as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/{draft_id}", response_model=DraftView)
async def draft_detail(
    draft_id: str,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> DraftView:
    """Draft with its blocks flattened back into editor text."""
    return await get_draft(upstream, session, draft_id)


@router.put("/{draft_id}", response_model=DraftView)
async def update_draft(
    draft_id: str,
    body: DraftInput,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> DraftView:
    try:
        return await save_draft(upstream, session, body, draft_id)
    except DraftIncomplete as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.delete("/{draft_id}", status_code=204)
async def remove_draft(
    draft_id: str,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> None:
    await delete_draft(upstream, session, draft_id)


@router.post("/{draft_id}/publish")
async def publish_draft(
    draft_id: str,
    body: DraftInput,
    session: SessionContext = Depends(require_session),  # noqa: B008
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, Any]:
    """Save the latest form state into the draft, then publish it."""
    try:
        return await publish(upstream, session, body, draft_id)
    except DraftIncomplete as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
