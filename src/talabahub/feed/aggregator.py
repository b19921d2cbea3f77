"""Merge the four search result groups into a tabbed feed.

The search endpoint answers with up to four collections, each shaped
``{total, results}``. Tabs and sections are derived purely from that answer;
every new query replaces the previous feed wholesale.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

COLLECTIONS: tuple[str, ...] = ("discounts", "jobs", "events", "courses")

TAB_TITLES: dict[str, str] = {
    "all": "Hammasi",
    "discounts": "Chegirmalar",
    "jobs": "Ish o'rinlari",
    "events": "Tadbirlar",
    "courses": "Kurslar",
}

ALL_TAB = "all"


class FeedTab(BaseModel):
    key: str
    title: str
    count: int
    active: bool = False


class FeedSection(BaseModel):
    key: str
    title: str
    total: int
    results: list[dict[str, Any]]


class Feed(BaseModel):
    query: str
    total: int
    active_tab: str = ALL_TAB
    tabs: list[FeedTab]
    sections: list[FeedSection]
    empty: bool


def _group(response: dict[str, Any] | None, key: str) -> tuple[int, list[dict[str, Any]]]:
    group = (response or {}).get(key) or {}
    return int(group.get("total") or 0), list(group.get("results") or [])


def total_results(response: dict[str, Any] | None) -> int:
    """Sum of the four collection totals; missing collections count as zero."""
    return sum(_group(response, key)[0] for key in COLLECTIONS)


def available_tabs(response: dict[str, Any] | None) -> list[str]:
    """``all`` plus every collection with a non-zero total."""
    return [ALL_TAB, *(key for key in COLLECTIONS if _group(response, key)[0] > 0)]


def aggregate(query: str, response: dict[str, Any] | None, active_tab: str = ALL_TAB) -> Feed:
    """Build the feed view for one search response.

    An unknown or unavailable ``active_tab`` falls back to ``all``. Sections
    are rendered for non-empty result lists only.
    """
    tabs = available_tabs(response)
    if active_tab not in tabs:
        active_tab = ALL_TAB
    total = total_results(response)

    tab_views = [
        FeedTab(
            key=key,
            title=TAB_TITLES[key],
            count=total if key == ALL_TAB else _group(response, key)[0],
            active=key == active_tab,
        )
        for key in tabs
    ]

    sections: list[FeedSection] = []
    for key in COLLECTIONS:
        if active_tab not in (ALL_TAB, key):
            continue
        group_total, results = _group(response, key)
        if not results:
            continue
        sections.append(FeedSection(key=key, title=TAB_TITLES[key], total=group_total, results=results))

    return Feed(
        query=query,
        total=total,
        active_tab=active_tab,
        tabs=tab_views,
        sections=sections,
        empty=total == 0,
    )


def empty_feed(query: str = "") -> Feed:
    return aggregate(query, None)
