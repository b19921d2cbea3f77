"""Search feed: one backend search per query, aggregated into tabs."""

from __future__ import annotations

import structlog

from talabahub.config import get_settings
from talabahub.feed.aggregator import ALL_TAB, Feed, aggregate, empty_feed
from talabahub.upstream.client import UpstreamClient

logger = structlog.get_logger()


async def search_feed(
    upstream: UpstreamClient,
    query: str,
    *,
    tab: str = ALL_TAB,
    limit: int | None = None,
) -> Feed:
    """Run the search and build the feed. A blank query never reaches the backend."""
    query = query.strip()
    if not query:
        return empty_feed()
    limit = limit or get_settings().search_limit
    response = await upstream.search(query, limit)
    feed = aggregate(query, response, tab)
    logger.debug("search_feed_built", query=query, total=feed.total, tabs=len(feed.tabs))
    return feed


async def suggestions(upstream: UpstreamClient, query: str, limit: int = 5) -> list[object]:
    query = query.strip()
    if not query:
        return []
    result = await upstream.search_suggestions(query, limit)
    if isinstance(result, dict):
        return list(result.get("suggestions") or result.get("data") or [])
    return list(result or [])
