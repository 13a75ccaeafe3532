# src/newsroom_backend/app/storage/deps.py
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom_backend.app.db.session import get_db
from newsroom_backend.app.storage.base import TopicStorage, UserStorage
from newsroom_backend.app.storage.sql import SQLStorage


# Routes depend on these, not on SQLStorage directly, so tests can swap
# in fakes through app.dependency_overrides.
def get_topic_storage(db: AsyncSession = Depends(get_db)) -> TopicStorage:
    return SQLStorage(db)


def get_user_storage(db: AsyncSession = Depends(get_db)) -> UserStorage:
    return SQLStorage(db)
