"""Public discount and job listings with gateway-side search, filters and sort."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from talabahub.listings.filters import (
    DISCOUNT_PAGE_SIZE,
    filter_discounts,
    filter_jobs,
    paginate,
    unique_values,
)
from talabahub.upstream.client import UpstreamClient, get_upstream
from talabahub.upstream.schemas import page_items

router = APIRouter(prefix="/api/v1", tags=["Listings"])

# One backend page feeds the local filters
_FETCH_LIMIT = 100


@router.get("/discounts")
async def discounts(
    search: str = Query("", max_length=200),
    category: str = Query("all"),
    sort: str = Query("newest", pattern="^(newest|highest_discount|ending_soon)$"),
    page: int = Query(1, ge=1),
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, Any]:
    """Discounts filtered and sorted locally, 12 per page."""
    items = page_items(await upstream.list_resource("discounts", {"limit": _FETCH_LIMIT}))
    filtered = filter_discounts(items, search=search, category=category, sort=sort)
    rows, total_pages = paginate(filtered, page, DISCOUNT_PAGE_SIZE)
    return {
        "data": rows,
        "total": len(filtered),
        "page": page,
        "total_pages": total_pages,
        "categories": unique_values(items, "category", "nameUz"),
        "has_active_filters": bool(search) or sort != "newest" or category != "all",
    }


@router.get("/jobs")
async def jobs(
    search: str = Query("", max_length=200),
    job_type: str = Query("all"),
    location: str = Query("all"),
    sort: str = Query("newest", pattern="^(newest|deadline|salary_high)$"),
    upstream: UpstreamClient = Depends(get_upstream),  # noqa: B008
) -> dict[str, Any]:
    """Jobs filtered and sorted locally."""
    items = page_items(await upstream.list_resource("jobs", {"limit": _FETCH_LIMIT}))
    filtered = filter_jobs(items, search=search, job_type=job_type, location=location, sort=sort)
    return {
        "data": filtered,
        "total": len(filtered),
        "locations": unique_values(items, "location"),
        "has_active_filters": bool(search) or sort != "newest" or job_type != "all" or location != "all",
    }
