"""Pydantic models for backend payloads (camelCase on the wire)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Base for models parsed from backend JSON; unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class PageMeta(UpstreamModel):
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0


def page_items(payload: dict[str, Any] | None) -> list[dict[str, Any]]:
    """Items of a ``{data, meta}`` page; a missing page reads as empty."""
    if not payload:
        return []
    return list(payload.get("data") or [])


def page_meta(payload: dict[str, Any] | None) -> PageMeta:
    if not payload or not payload.get("meta"):
        return PageMeta()
    return PageMeta.model_validate(payload["meta"])


class PageMetaResponse(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int = Field(0, ge=0)

    @classmethod
    def from_meta(cls, meta: PageMeta) -> PageMetaResponse:
        return cls(total=meta.total, page=meta.page, limit=meta.limit, total_pages=meta.total_pages)
