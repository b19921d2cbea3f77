"""Article drafts: save, load, publish."""

from __future__ import annotations

from typing import Any

import structlog

from talabahub.articles.blocks import blocks_to_text, text_to_blocks
from talabahub.articles.schemas import ArticleDraft, DraftInput, DraftView
from talabahub.auth.session import SessionContext
from talabahub.upstream.client import UpstreamClient

logger = structlog.get_logger()


class DraftIncomplete(ValueError):
    """Publishing needs a title and a body."""


def draft_payload(data: DraftInput) -> dict[str, Any]:
    """Backend body for a draft; unset optional fields are left out."""
    payload: dict[str, Any] = {
        "title": data.title.strip(),
        "content": [b.model_dump(mode="json") for b in text_to_blocks(data.text)],
        "tags": list(data.tags),
        "isUnlisted": data.is_unlisted,
    }
    subtitle = (data.subtitle or "").strip()
    if subtitle:
        payload["subtitle"] = subtitle
    if data.featured_image_url:
        payload["featuredImageUrl"] = data.featured_image_url
    return payload


def present_draft(draft: ArticleDraft) -> DraftView:
    blocks = sorted(draft.content, key=lambda b: b.position or 0)
    return DraftView(
        id=draft.id,
        title=draft.title,
        subtitle=draft.subtitle,
        text=blocks_to_text(blocks),
        blocks=blocks,
        featured_image_url=draft.featured_image_url,
        tags=draft.tags,
        is_unlisted=draft.is_unlisted,
        updated_at=draft.updated_at,
    )


def _drafts(payload: Any) -> list[ArticleDraft]:  # noqa: ANN401
    items = payload.get("data", []) if isinstance(payload, dict) else payload or []
    return [ArticleDraft.model_validate(item) for item in items]


async def list_drafts(upstream: UpstreamClient, session: SessionContext) -> list[DraftView]:
    payload = await upstream.get_my_article_drafts(session.token)  # type: ignore[arg-type]
    return [present_draft(d) for d in _drafts(payload)]


async def get_draft(upstream: UpstreamClient, session: SessionContext, draft_id: str) -> DraftView:
    payload = await upstream.get_article_draft(session.token, draft_id)  # type: ignore[arg-type]
    return present_draft(ArticleDraft.model_validate(payload))


async def save_draft(
    upstream: UpstreamClient,
    session: SessionContext,
    data: DraftInput,
    draft_id: str | None = None,
) -> DraftView:
    """Create the draft, or update it when ``draft_id`` is given."""
    if not data.title.strip():
        msg = "A draft needs a title"
        raise DraftIncomplete(msg)
    body = draft_payload(data)
    if draft_id:
        payload = await upstream.update_article_draft(session.token, draft_id, body)  # type: ignore[arg-type]
    else:
        payload = await upstream.create_article_draft(session.token, body)  # type: ignore[arg-type]
    draft = ArticleDraft.model_validate(payload)
    logger.info("article_draft_saved", draft_id=draft.id, blocks=len(body["content"]), created=draft_id is None)
    return present_draft(draft)


async def delete_draft(upstream: UpstreamClient, session: SessionContext, draft_id: str) -> None:
    await upstream.delete_article_draft(session.token, draft_id)  # type: ignore[arg-type]
    logger.info("article_draft_deleted", draft_id=draft_id)


async def publish(
    upstream: UpstreamClient,
    session: SessionContext,
    data: DraftInput,
    draft_id: str | None = None,
) -> dict[str, Any]:
    """Save the draft first, then publish it. The draft stays for history."""
    if not data.title.strip() or not data.text.strip():
        msg = "Sarlavha va kontent kiritilishi shart"
        raise DraftIncomplete(msg)
    saved = await save_draft(upstream, session, data, draft_id)
    article = await upstream.publish_article(session.token, saved.id)  # type: ignore[arg-type]
    logger.info("article_published", draft_id=saved.id, author_id=session.user_id)
    return article or {"draft_id": saved.id}
