# src/newsroom_backend/app/db/session.py
from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from newsroom_backend.app.core.config import get_settings


# ------------------------------------------------------------
# Base class for ORM models
# ------------------------------------------------------------
class Base(DeclarativeBase):
    """Base for all ORM models."""
    pass


# ------------------------------------------------------------
# Engine / session factory (created on first use, keyed by URL)
# ------------------------------------------------------------
@lru_cache(maxsize=4)
def get_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo)


def get_sessionmaker(url: str | None = None) -> async_sessionmaker[AsyncSession]:
    settings = get_settings()
    engine = get_engine(url or settings.database_url, settings.db_echo)
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


# ------------------------------------------------------------
# FastAPI DB dependency
# ------------------------------------------------------------
async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Provides an async SQLAlchemy session for one request.
    Ensures proper cleanup after request.
    """
    async with get_sessionmaker()() as session:
        yield session


async def test_connection() -> int:
    """Verify DB connectivity (used by /healthz/db)."""
    async with get_sessionmaker()() as session:
        result = await session.execute(text("SELECT 1"))
        return result.scalar_one()
