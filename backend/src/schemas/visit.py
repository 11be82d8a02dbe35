"""Pydantic schemas for visit analytics endpoints."""
from datetime import date
from typing import Literal

from pydantic import Field

from schemas.validators import CamelModel, UtcDateTime

Period = Literal["day", "week", "month", "year", "all"]


class TrackVisitRequest(CamelModel):
    """Record that a bookmark was opened."""

    bookmark_id: str = Field(min_length=1)


class VisitStats(CamelModel):
    """Overall visit counters."""

    total_visits: int
    today_visits: int
    week_visits: int
    month_visits: int
    total_bookmarks: int
    visited_bookmarks: int


class TopBookmark(CamelModel):
    """A bookmark with its visit count for the requested period."""

    id: str
    url: str
    title: str
    description: str | None
    favicon: str | None
    icon: str | None
    icon_url: str | None
    category: str | None
    visit_count: int


class TrendPoint(CamelModel):
    """Visit count for a single UTC day."""

    date: date
    count: int


class VisitBookmarkSummary(CamelModel):
    """Bookmark fields embedded in a recent-visit entry."""

    id: str
    url: str
    title: str
    favicon: str | None
    icon: str | None
    icon_url: str | None


class RecentVisit(CamelModel):
    """A single visit with the bookmark it refers to."""

    id: str
    visited_at: UtcDateTime
    ip: str | None
    user_agent: str | None
    bookmark: VisitBookmarkSummary


class BookmarkVisitStats(CamelModel):
    """Visit summary for one bookmark, including a 7-day daily trend (oldest first)."""

    bookmark_id: str
    visit_count: int
    last_visited: UtcDateTime | None
    trend: list[int]
