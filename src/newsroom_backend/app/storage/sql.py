# src/newsroom_backend/app/storage/sql.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom_backend.app.core.errors import ParseError, StorageError
from newsroom_backend.app.db import models as orm
from newsroom_backend.app.models.topic import TopicFilter, TopicFull, TopicMeta, split_sort
from newsroom_backend.app.models.user import PRIVILEGE_REGISTERED, OAuthAccount, User

_log = logging.getLogger(__name__)

META_COLUMNS = [getattr(orm.Topic, name) for name in TopicMeta.model_fields]
_PROFILE_FIELDS = ("email", "name", "first_name", "last_name", "gender", "picture")


def order_by_clause(sort: str):
    """'-publishedDate' -> published_date DESC; unknown field -> ParseError."""
    try:
        attr, desc = split_sort(sort)
    except ValueError as ex:
        raise ParseError(str(ex), where="storage.sql.order_by") from ex
    col = getattr(orm.Topic, attr)
    return col.desc() if desc else col.asc()


def _where(mq: TopicFilter):
    conds = []
    if mq.slug is not None:
        conds.append(orm.Topic.slug == mq.slug)
    if mq.state is not None:
        conds.append(orm.Topic.state == mq.state)
    if mq.slugs:
        conds.append(orm.Topic.slug.in_(mq.slugs))
    return conds


class SQLStorage:
    """TopicStorage + UserStorage on one AsyncSession (one per request)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------
    # Topics
    # ------------------------
    async def _count(self, mq: TopicFilter) -> int:
        stmt = select(func.count()).select_from(orm.Topic).where(*_where(mq))
        return (await self.db.execute(stmt)).scalar_one()

    async def get_full_topics(
        self, mq: TopicFilter, limit: int, offset: int, sort: str
    ) -> Tuple[List[TopicFull], int]:
        stmt = (
            select(orm.Topic)
            .where(*_where(mq))
            .order_by(order_by_clause(sort), orm.Topic.id)
            .limit(limit)
            .offset(offset)
        )
        try:
            rows = (await self.db.execute(stmt)).scalars().all()
            total = await self._count(mq)
        except SQLAlchemyError as ex:
            raise StorageError(str(ex), where="storage.sql.get_full_topics") from ex
        return [TopicFull.model_validate(r) for r in rows], total

    async def get_meta_of_topics(
        self, mq: TopicFilter, limit: int, offset: int, sort: str
    ) -> Tuple[List[TopicMeta], int]:
        stmt = (
            select(*META_COLUMNS)
            .where(*_where(mq))
            .order_by(order_by_clause(sort), orm.Topic.id)
            .limit(limit)
            .offset(offset)
        )
        try:
            rows = (await self.db.execute(stmt)).mappings().all()
            total = await self._count(mq)
        except SQLAlchemyError as ex:
            raise StorageError(str(ex), where="storage.sql.get_meta_of_topics") from ex
        return [TopicMeta.model_validate(dict(r)) for r in rows], total

    # ------------------------
    # Users / OAuth accounts
    # ------------------------
    async def _find_account(self, account: OAuthAccount) -> Optional[orm.OAuthAccount]:
        stmt = select(orm.OAuthAccount).where(
            orm.OAuthAccount.type == account.type,
            orm.OAuthAccount.a_id == account.a_id,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def get_user_data_by_oauth(self, account: OAuthAccount) -> Optional[User]:
        try:
            row = await self._find_account(account)
            if row is None:
                return None
            user = await self.db.get(orm.User, row.user_id)
        except SQLAlchemyError as ex:
            raise StorageError(str(ex), where="storage.sql.get_user_data_by_oauth") from ex
        return User.model_validate(user) if user is not None else None

    async def insert_user_by_oauth(self, account: OAuthAccount) -> User:
        user = orm.User(
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            privilege=PRIVILEGE_REGISTERED,
            active=True,
        )
        user.oauth_accounts.append(
            orm.OAuthAccount(type=account.type, a_id=account.a_id,
                             **{f: getattr(account, f) for f in _PROFILE_FIELDS})
        )
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except SQLAlchemyError as ex:
            await self.db.rollback()
            raise StorageError(str(ex), where="storage.sql.insert_user_by_oauth") from ex
        _log.info("inserted user id=%s for %s account %s", user.id, account.type, account.a_id)
        return User.model_validate(user)

    async def update_oauth_data(self, account: OAuthAccount) -> User:
        try:
            row = await self._find_account(account)
            if row is None:
                raise StorageError(
                    f"no {account.type} account {account.a_id}",
                    where="storage.sql.update_oauth_data",
                )
            for f in _PROFILE_FIELDS:
                setattr(row, f, getattr(account, f))
            await self.db.commit()
            user = await self.db.get(orm.User, row.user_id)
        except SQLAlchemyError as ex:
            await self.db.rollback()
            raise StorageError(str(ex), where="storage.sql.update_oauth_data") from ex
        return User.model_validate(user)
