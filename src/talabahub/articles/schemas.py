"""Article draft schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from talabahub.articles.blocks import MAX_TAGS, ContentBlock
from talabahub.upstream.schemas import UpstreamModel


class ArticleDraft(UpstreamModel):
    id: str
    title: str = ""
    subtitle: str | None = None
    content: list[ContentBlock] = []
    featured_image_url: str | None = None
    tags: list[str] = []
    is_unlisted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def tag_slugs(cls, v: Any) -> Any:  # noqa: ANN401
        """Tags may arrive as objects; keep their slugs."""
        if not isinstance(v, list):
            return v
        return [(t.get("slug") or t.get("name")) if isinstance(t, dict) else t for t in v]


class DraftInput(BaseModel):
    """Editor form: the body is flat text, split into blocks on save."""

    title: str = Field(..., max_length=300)
    subtitle: str | None = Field(None, max_length=500)
    text: str = ""
    featured_image_url: str | None = None
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    is_unlisted: bool = False


class DraftView(BaseModel):
    id: str
    title: str
    subtitle: str | None = None
    text: str
    blocks: list[ContentBlock]
    featured_image_url: str | None = None
    tags: list[str]
    is_unlisted: bool
    updated_at: datetime | None = None
