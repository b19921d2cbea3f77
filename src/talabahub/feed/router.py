"""Search feed endpoints."""

from fastapi import APIRouter, Depends, Query

from talabahub.feed.aggregator import Feed
from talabahub.feed.service import search_feed, suggestions
from talabahub.upstream.client import UpstreamClient, get_upstream

router = APIRouter(prefix="/api/v1/search", tags=["Search"])


@router.get("", response_model=Feed)
async def search(
    query: str = Query("", max_length=200),
    tab: str = Query("all", pattern="^(all|discounts|jobs|events|courses)$"),
    limit: int | None = Query(None, ge=1, le=100),
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> Feed:
    """Search discounts, jobs, events and courses in one go."""
    return await search_feed(upstream, query, tab=tab, limit=limit)


@router.get("/suggestions")
async def search_suggestions(
    query: str = Query("", max_length=200),
    limit: int = Query(5, ge=1, le=20),
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> list[object]:
    return await suggestions(upstream, query, limit)
