# src/newsroom_backend/app/services/topics.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple, Union

from newsroom_backend.app.core.errors import NotFound
from newsroom_backend.app.models.topic import (
    DEFAULT_LIMIT,
    DEFAULT_SORT,
    MetaOfResponse,
    TopicFilter,
    TopicFull,
    TopicMeta,
)
from newsroom_backend.app.services.query import QueryParseResult
from newsroom_backend.app.storage.base import TopicStorage, bounded

_log = logging.getLogger(__name__)

Topic = Union[TopicFull, TopicMeta]


async def resolve_topics(
    storage: TopicStorage,
    mq: TopicFilter,
    limit: int,
    offset: int,
    sort: str,
    full: bool,
    *,
    timeout: float,
) -> Tuple[List[Topic], int]:
    """
    Fetch one page of topics in the full or meta projection.
    limit 0 -> 10, empty sort -> "-publishedDate".
    Returns (records, total); records is never None.
    """
    limit = limit or DEFAULT_LIMIT
    sort = sort or DEFAULT_SORT

    call = storage.get_full_topics if full else storage.get_meta_of_topics
    records, total = await bounded(
        call(mq, limit, offset, sort), timeout, "services.topics.resolve_topics"
    )
    return list(records or [])[:limit], total


def envelope(records: List[Topic], total: int, offset: int, limit: int) -> Dict[str, Any]:
    return {
        "status": "ok",
        "records": [r.model_dump(mode="json") for r in records],
        "meta": MetaOfResponse(total=total, offset=offset, limit=limit).model_dump(),
    }


async def get_topics(storage: TopicStorage, parsed: QueryParseResult, *, timeout: float) -> Dict[str, Any]:
    """
    List endpoint body. Unparseable parameters degrade to an empty page
    (status ok, total 0) instead of an error response.
    """
    q = parsed.query
    if not parsed.ok:
        _log.info("topics query params rejected, returning empty page: %s", parsed.error.detail)
        return envelope([], 0, q.offset, q.limit)

    limit = q.limit or DEFAULT_LIMIT
    records, total = await resolve_topics(
        storage, q.filter, limit, q.offset, q.sort, q.full, timeout=timeout
    )
    return envelope(records, total, q.offset, limit)


async def get_a_topic(storage: TopicStorage, slug: str, full: bool, *, timeout: float) -> Dict[str, Any]:
    """Single topic by exact slug; pagination params are ignored. Raises NotFound."""
    records, _ = await resolve_topics(
        storage, TopicFilter(slug=slug), 1, 0, DEFAULT_SORT, full, timeout=timeout
    )
    if not records:
        raise NotFound(where="services.topics.get_a_topic")
    return {"status": "ok", "record": records[0].model_dump(mode="json")}
