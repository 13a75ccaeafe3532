# src/newsroom_backend/app/models/topic.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LIMIT = 10
DEFAULT_SORT = "-publishedDate"


class TopicMeta(BaseModel):
    """Listing-level projection of a topic."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    title: str = ""
    short_title: Optional[str] = None
    topic_name: Optional[str] = None
    state: Optional[str] = None
    published_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    leading_image: Optional[str] = None


class TopicFull(TopicMeta):
    """Complete projection: meta fields plus all content fields."""

    subtitle: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None
    team_description: Optional[str] = None
    title_position: Optional[str] = None
    leading_video: Optional[str] = None
    leading_image_portrait: Optional[str] = None
    relateds: List[str] = Field(default_factory=list)
    relateds_format: Optional[str] = None
    relateds_background: Optional[str] = None


class TopicFilter(BaseModel):
    """Filter criteria; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    slug: Optional[str] = None
    state: Optional[str] = None
    slugs: Optional[List[str]] = None


class TopicQuery(BaseModel):
    """Per-request query descriptor."""

    filter: TopicFilter = Field(default_factory=TopicFilter)
    limit: int = 0
    offset: int = 0
    sort: str = ""
    full: bool = False


class MetaOfResponse(BaseModel):
    total: int = 0
    offset: int = 0
    limit: int = 0


# API sort field -> topic attribute
SORTABLE = {
    "publishedDate": "published_date",
    "published_date": "published_date",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "title": "title",
    "slug": "slug",
}


def split_sort(sort: str) -> Tuple[str, bool]:
    """'-publishedDate' -> ('published_date', True). Raises ValueError on unknown fields."""
    desc = sort.startswith("-")
    field = sort[1:] if sort[:1] in ("-", "+") else sort
    try:
        return SORTABLE[field], desc
    except KeyError:
        raise ValueError(f"unsupported sort field: {field!r}") from None
