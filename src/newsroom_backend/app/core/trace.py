# src/newsroom_backend/app/core/trace.py
from __future__ import annotations
import logging
import os
import time
from typing import Any, Mapping

from .logging import setup_logging

setup_logging()

_log = logging.getLogger("newsroom.auth")

def _enabled() -> bool:
    return (os.getenv("AUTH_TRACE", "")).lower() in ("1", "true", "yes", "on")

def _fmt_kv(d: Mapping[str, Any]) -> str:
    return " ".join(f"{k}={d[k]}" for k in d)

def auth_trace(event: str, **kv: Any) -> None:
    """
    Emit a single-line structured log ONLY when AUTH_TRACE=true.
    Example:
      [auth] oauth.facebook.begin ts=... location=https://example.org/
    """
    if not _enabled():
        return
    kv2 = {"ts": int(time.time()), **kv}
    _log.info("[auth] %s %s", event, _fmt_kv(kv2))
