# src/newsroom_backend/app/services/query.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import ValidationError

from newsroom_backend.app.core.errors import ParseError
from newsroom_backend.app.models.topic import TopicFilter, TopicQuery, split_sort

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

# limit and offset are bound as signed 64-bit SQL integers
MAX_BOUND = 2**63 - 1


def parse_bool(raw: str) -> bool:
    """Accepts 1/t/T/TRUE/true/True and 0/f/F/FALSE/false/False."""
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"invalid boolean: {raw!r}")


@dataclass(frozen=True)
class QueryParseResult:
    """
    Outcome of parsing list-query parameters.
    `query` always holds whatever did parse; `error` is set when anything failed.
    """

    query: TopicQuery
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _non_negative(name: str, raw: str) -> int:
    val = int(raw)
    if val < 0:
        raise ValueError(f"{name} must be >= 0, got {val}")
    if val > MAX_BOUND:
        raise ValueError(f"{name} must be <= {MAX_BOUND}, got {val}")
    return val


def parse_topic_query(params: Mapping[str, str]) -> QueryParseResult:
    """
    Parse `q`, `limit`, `offset`, `sort`, `full` from a query-string mapping.
    Defaults (limit=10, sort=-publishedDate) are NOT applied here; the
    resolver applies them so an unset value stays distinguishable.
    """
    fields = {}
    errors = []

    raw_q = params.get("q")
    if raw_q:
        try:
            obj = json.loads(raw_q)
            if not isinstance(obj, dict):
                raise ValueError("q must be a JSON object")
            fields["filter"] = TopicFilter.model_validate(obj)
        except (ValueError, ValidationError) as ex:
            errors.append(f"q: {ex}")

    for name in ("limit", "offset"):
        raw = params.get(name)
        if raw:
            try:
                fields[name] = _non_negative(name, raw)
            except ValueError as ex:
                errors.append(f"{name}: {ex}")

    raw_sort = params.get("sort")
    if raw_sort:
        try:
            split_sort(raw_sort)
            fields["sort"] = raw_sort
        except ValueError as ex:
            errors.append(f"sort: {ex}")

    raw_full = params.get("full")
    if raw_full:
        try:
            fields["full"] = parse_bool(raw_full)
        except ValueError as ex:
            errors.append(f"full: {ex}")

    query = TopicQuery(**fields)
    if errors:
        return QueryParseResult(query, ParseError("; ".join(errors), where="services.query"))
    return QueryParseResult(query)
