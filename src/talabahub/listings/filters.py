"""Filter and sort over an already-fetched listing page.

All functions are pure: the input list is never mutated, and applying the
same filters twice gives the same result. Sorts are stable.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from talabahub.export.formatter import parse_datetime

Item = Mapping[str, Any]

DISCOUNT_SORTS: tuple[str, ...] = ("newest", "highest_discount", "ending_soon")
JOB_SORTS: tuple[str, ...] = ("newest", "deadline", "salary_high")

DISCOUNT_PAGE_SIZE = 12

_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def leading_float(value: Any) -> float:  # noqa: ANN401
    """Numeric prefix of ``value`` (``"5000-8000"`` -> 5000.0); 0 when there is none."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _LEADING_FLOAT_RE.match(str(value or ""))
    return float(match.group()) if match else 0.0


def _timestamp(value: Any) -> float:  # noqa: ANN401
    parsed = parse_datetime(value)
    if parsed is None:
        return 0.0
    if parsed.tzinfo is None:
        return (parsed - datetime(1970, 1, 1)).total_seconds()
    return parsed.timestamp()


def _field(item: Item, *path: str) -> Any:  # noqa: ANN401
    """Follow ``path`` through nested objects; None once a step is not an object."""
    value: Any = item
    for key in path:
        value = value.get(key) if isinstance(value, Mapping) else None
    return value


def _text(item: Item, *path: str) -> str:
    value = _field(item, *path)
    return str(value or "").lower()


def _matches(item: Item, query: str, fields: Sequence[tuple[str, ...]]) -> bool:
    q = query.lower()
    return any(q in _text(item, *path) for path in fields)


def filter_discounts(
    discounts: Sequence[Item],
    *,
    search: str = "",
    category: str = "all",
    sort: str = "newest",
) -> list[Item]:
    """Search in title, description and brand name; filter by category name."""
    if sort not in DISCOUNT_SORTS:
        msg = f"Unknown sort: {sort}"
        raise ValueError(msg)
    result = list(discounts)
    if search:
        result = [
            d for d in result
            if _matches(d, search, [("title",), ("description",), ("brand", "name")])
        ]
    if category != "all":
        result = [d for d in result if _field(d, "category", "nameUz") == category]

    if sort == "newest":
        result.sort(key=lambda d: _timestamp(d.get("validFrom")), reverse=True)
    elif sort == "highest_discount":
        result.sort(key=lambda d: leading_float(d.get("discount")), reverse=True)
    else:
        result.sort(key=lambda d: _timestamp(d.get("validUntil")))
    return result


def filter_jobs(
    jobs: Sequence[Item],
    *,
    search: str = "",
    job_type: str = "all",
    location: str = "all",
    sort: str = "newest",
) -> list[Item]:
    """Search in title, description, company and location; filter by type and location."""
    if sort not in JOB_SORTS:
        msg = f"Unknown sort: {sort}"
        raise ValueError(msg)
    result = list(jobs)
    if search:
        result = [
            j for j in result
            if _matches(j, search, [("title",), ("description",), ("company", "name"), ("location",)])
        ]
    if job_type != "all":
        result = [j for j in result if j.get("jobType") == job_type]
    if location != "all":
        result = [j for j in result if j.get("location") == location]

    if sort == "newest":
        result.sort(key=lambda j: _timestamp(j.get("createdAt")), reverse=True)
    elif sort == "deadline":
        result.sort(key=lambda j: _timestamp(j.get("applicationDeadline")))
    else:
        result.sort(key=lambda j: leading_float(j.get("salary")), reverse=True)
    return result


def unique_values(items: Sequence[Item], *path: str) -> list[str]:
    """Distinct non-empty values in first-seen order (filter dropdowns)."""
    seen: dict[str, None] = {}
    for item in items:
        value = _field(item, *path)
        if value:
            seen.setdefault(str(value), None)
    return list(seen)


def paginate(items: Sequence[Item], page: int, page_size: int) -> tuple[list[Item], int]:
    """Slice one page; returns the page and the total page count."""
    total_pages = (len(items) + page_size - 1) // page_size
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), total_pages
