# src/newsroom_backend/app/core/logging.py
from __future__ import annotations
import logging
import os
from typing import Optional

_FMT = "%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# third-party loggers that are too chatty at INFO
_QUIET = ("httpx", "httpcore", "sqlalchemy.engine")

def _level(name: Optional[str], default: int = logging.INFO) -> int:
    val = (name or "").strip().upper()
    lvl = logging.getLevelName(val) if val else default
    return lvl if isinstance(lvl, int) else default

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once. Idempotent.
    LOG_LEVEL controls verbosity (default INFO); an explicit `level` wins.
    HTTP client and SQL engine loggers are held at WARNING unless
    LOG_LEVEL=DEBUG.
    """
    lvl = _level(level or os.getenv("LOG_LEVEL"))
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FMT, datefmt=_DATEFMT))
        root.addHandler(handler)
    # already configured (pytest, uvicorn, etc.) -> only adjust levels
    root.setLevel(lvl)

    for name in _QUIET:
        logging.getLogger(name).setLevel(lvl if lvl <= logging.DEBUG else logging.WARNING)
