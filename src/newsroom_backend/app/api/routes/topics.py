# src/newsroom_backend/app/api/routes/topics.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from newsroom_backend.app.core.config import Settings, get_settings
from newsroom_backend.app.services.query import parse_bool, parse_topic_query
from newsroom_backend.app.services.topics import get_a_topic, get_topics
from newsroom_backend.app.storage.base import TopicStorage
from newsroom_backend.app.storage.deps import get_topic_storage

router = APIRouter(tags=["topics"])


@router.get("/topics")
async def list_topics(
    request: Request,
    storage: TopicStorage = Depends(get_topic_storage),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Query params (all optional):
      q      : JSON filter, e.g. {"state": "published"} or {"slugs": ["a", "b"]}
      limit  : page size (default 10)
      offset : records to skip (default 0)
      sort   : field with optional '-' for descending (default -publishedDate)
      full   : true for the full projection, false for meta (default)

    Malformed params yield an empty page rather than an error.
    """
    parsed = parse_topic_query(request.query_params)
    return await get_topics(storage, parsed, timeout=settings.storage_timeout_sec)


@router.get("/topics/{slug}")
async def read_topic(
    slug: str,
    full: str = "",
    storage: TopicStorage = Depends(get_topic_storage),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    try:
        want_full = parse_bool(full)
    except ValueError:
        want_full = False
    return await get_a_topic(storage, slug, want_full, timeout=settings.storage_timeout_sec)
