# src/newsroom_backend/app/storage/base.py
from __future__ import annotations

import asyncio
from typing import Awaitable, List, Optional, Protocol, Tuple, TypeVar

from newsroom_backend.app.core.errors import APIError, StorageError
from newsroom_backend.app.models.topic import TopicFilter, TopicFull, TopicMeta
from newsroom_backend.app.models.user import OAuthAccount, User

T = TypeVar("T")


class TopicStorage(Protocol):
    """Read access to topics. Both calls return (records, total-before-paging)."""

    async def get_full_topics(
        self, mq: TopicFilter, limit: int, offset: int, sort: str
    ) -> Tuple[List[TopicFull], int]: ...

    async def get_meta_of_topics(
        self, mq: TopicFilter, limit: int, offset: int, sort: str
    ) -> Tuple[List[TopicMeta], int]: ...


class UserStorage(Protocol):
    async def get_user_data_by_oauth(self, account: OAuthAccount) -> Optional[User]:
        """Return the local user owning (account.type, account.a_id), or None."""
        ...

    async def insert_user_by_oauth(self, account: OAuthAccount) -> User:
        """Create a local user plus its OAuth account; return the new user."""
        ...

    async def update_oauth_data(self, account: OAuthAccount) -> User:
        """Refresh the stored OAuth profile fields; return the owning user."""
        ...


async def bounded(call: Awaitable[T], timeout: float, where: str) -> T:
    """
    Await a storage call with a deadline.
    Timeouts and non-API exceptions surface as StorageError.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as ex:
        raise StorageError(f"storage call timed out after {timeout}s", where=where) from ex
    except APIError:
        raise
    except Exception as ex:
        raise StorageError(str(ex), where=where) from ex
