# tests/conftest.py
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from newsroom_backend.app.main import app
from newsroom_backend.app.core.config import get_settings
from newsroom_backend.app.core.errors import StorageError
from newsroom_backend.app.models.topic import TopicFilter, TopicFull, TopicMeta, split_sort
from newsroom_backend.app.models.user import OAuthAccount, User
from newsroom_backend.app.storage.deps import get_topic_storage, get_user_storage

# ---------- Test env ----------
SITE_URL = "https://www.example.org"
OAUTH_STATE = "anti-forgery-state"
CLIENT_ID = "fb-client-id"
REDIRECT_URL = "http://api.test/oauth/facebook/callback"
AUTH_URL = "https://www.facebook.com/v2.8/dialog/oauth"
TOKEN_URL = "https://graph.facebook.com/v2.8/oauth/access_token"
PROFILE_URL = "https://graph.facebook.com/v2.8/me"
JWT_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Pin settings to test values and drop the cached Settings around each test."""
    monkeypatch.setenv("FACEBOOK_CLIENT_ID", CLIENT_ID)
    monkeypatch.setenv("FACEBOOK_CLIENT_SECRET", "fb-secret")
    monkeypatch.setenv("FACEBOOK_REDIRECT_URL", REDIRECT_URL)
    monkeypatch.setenv("FACEBOOK_AUTH_URL", AUTH_URL)
    monkeypatch.setenv("FACEBOOK_TOKEN_URL", TOKEN_URL)
    monkeypatch.setenv("FACEBOOK_PROFILE_URL", PROFILE_URL)
    monkeypatch.setenv("OAUTH_STATE", OAUTH_STATE)
    monkeypatch.setenv("APP_PATH", SITE_URL)
    monkeypatch.setenv("SITE_URL", SITE_URL)
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("DB_ECHO", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------- Fake storages ----------
class FakeTopicStorage:
    """In-memory TopicStorage; records every call."""

    def __init__(
        self, topics: Optional[List[TopicFull]] = None, fail: bool = False, delay: float = 0.0
    ) -> None:
        self.topics = list(topics or [])
        self.fail = fail
        self.delay = delay
        self.calls: List[Tuple[str, TopicFilter, int, int, str]] = []

    def _page(self, mq: TopicFilter, limit: int, offset: int, sort: str) -> Tuple[List[TopicFull], int]:
        if self.fail:
            raise StorageError("connection refused", where="fake")
        rows = [
            t for t in self.topics
            if (mq.slug is None or t.slug == mq.slug)
            and (mq.state is None or t.state == mq.state)
            and (not mq.slugs or t.slug in mq.slugs)
        ]
        attr, desc = split_sort(sort)
        rows.sort(key=lambda t: getattr(t, attr), reverse=desc)
        return rows[offset:offset + limit], len(rows)

    async def get_full_topics(self, mq, limit, offset, sort):
        self.calls.append(("full", mq, limit, offset, sort))
        await asyncio.sleep(self.delay)
        return self._page(mq, limit, offset, sort)

    async def get_meta_of_topics(self, mq, limit, offset, sort):
        self.calls.append(("meta", mq, limit, offset, sort))
        await asyncio.sleep(self.delay)
        page, total = self._page(mq, limit, offset, sort)
        return [TopicMeta.model_validate(t.model_dump()) for t in page], total


class FakeUserStorage:
    """In-memory UserStorage with insert/update counters."""

    def __init__(self, fail_insert: bool = False, fail_lookup: bool = False) -> None:
        self.users: Dict[int, User] = {}
        self.accounts: Dict[Tuple[str, str], Tuple[int, OAuthAccount]] = {}
        self.fail_insert = fail_insert
        self.fail_lookup = fail_lookup
        self.inserts = 0
        self.updates = 0

    def seed(self, account: OAuthAccount, **user_fields) -> User:
        uid = len(self.users) + 1
        user = User(id=uid, **user_fields)
        self.users[uid] = user
        self.accounts[(account.type, account.a_id)] = (uid, account)
        return user

    async def get_user_data_by_oauth(self, account):
        if self.fail_lookup:
            raise StorageError("lookup failed", where="fake")
        hit = self.accounts.get((account.type, account.a_id))
        return self.users[hit[0]] if hit else None

    async def insert_user_by_oauth(self, account):
        self.inserts += 1
        if self.fail_insert:
            raise StorageError("duplicate key", where="fake")
        return self.seed(account, email=account.email,
                         first_name=account.first_name, last_name=account.last_name)

    async def update_oauth_data(self, account):
        self.updates += 1
        uid, _ = self.accounts[(account.type, account.a_id)]
        self.accounts[(account.type, account.a_id)] = (uid, account)
        return self.users[uid]


def make_topic(i: int, **kw) -> TopicFull:
    fields = dict(
        id=i,
        slug=f"topic-{i}",
        title=f"Topic {i}",
        state="published",
        published_date=datetime(2017, 1, i),
        description=f"full description {i}",
        relateds=[f"post-{i}-a", f"post-{i}-b"],
    )
    fields.update(kw)
    return TopicFull(**fields)


# ---------- Fixtures ----------
@pytest.fixture
def topic_storage() -> FakeTopicStorage:
    return FakeTopicStorage([make_topic(i) for i in range(1, 13)])


@pytest.fixture
def user_storage() -> FakeUserStorage:
    return FakeUserStorage()


@pytest.fixture
def client(topic_storage, user_storage):
    app.dependency_overrides[get_topic_storage] = lambda: topic_storage
    app.dependency_overrides[get_user_storage] = lambda: user_storage
    c = TestClient(app, follow_redirects=False)
    yield c
    app.dependency_overrides.clear()
