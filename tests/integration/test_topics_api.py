import json

import pytest

from conftest import FakeTopicStorage, make_topic

from newsroom_backend.app.core.config import get_settings
from newsroom_backend.app.main import app
from newsroom_backend.app.storage.deps import get_topic_storage


def test_empty_store_returns_empty_page(client, topic_storage):
    topic_storage.topics = []
    r = client.get("/topics", params={"full": "false"})
    assert r.status_code == 200, r.text
    assert r.json() == {"status": "ok", "records": [], "meta": {"total": 0, "offset": 0, "limit": 10}}


def test_defaults_applied(client, topic_storage):
    r = client.get("/topics")
    assert r.status_code == 200
    body = r.json()
    assert len(body["records"]) == 10
    assert body["meta"] == {"total": 12, "offset": 0, "limit": 10}

    kind, _, limit, offset, sort = topic_storage.calls[-1]
    assert (kind, limit, offset, sort) == ("meta", 10, 0, "-publishedDate")
    # newest first
    assert body["records"][0]["slug"] == "topic-12"


def test_pagination_and_total(client):
    r = client.get("/topics", params={"limit": 5, "offset": 10})
    body = r.json()
    assert [t["slug"] for t in body["records"]] == ["topic-2", "topic-1"]
    assert body["meta"] == {"total": 12, "offset": 10, "limit": 5}


def test_meta_projection_hides_content_fields(client):
    r = client.get("/topics", params={"limit": 1})
    rec = r.json()["records"][0]
    assert "description" not in rec
    assert "relateds" not in rec
    assert rec["published_date"].startswith("2017-01-12")


def test_full_projection(client, topic_storage):
    r = client.get("/topics", params={"full": "true", "limit": 1, "sort": "publishedDate"})
    rec = r.json()["records"][0]
    assert rec["slug"] == "topic-1"
    assert rec["description"] == "full description 1"
    assert rec["relateds"] == ["post-1-a", "post-1-b"]
    assert topic_storage.calls[-1][0] == "full"


def test_filter_by_query(client, topic_storage):
    topic_storage.topics.append(make_topic(13, state="draft"))
    r = client.get("/topics", params={"q": json.dumps({"state": "draft"})})
    body = r.json()
    assert [t["slug"] for t in body["records"]] == ["topic-13"]
    assert body["meta"]["total"] == 1


@pytest.mark.parametrize("params,meta", [
    ({"limit": "abc"}, {"total": 0, "offset": 0, "limit": 0}),
    ({"limit": "3", "offset": "-4"}, {"total": 0, "offset": 0, "limit": 3}),
    ({"q": "{broken", "offset": "2"}, {"total": 0, "offset": 2, "limit": 0}),
    ({"sort": "-views"}, {"total": 0, "offset": 0, "limit": 0}),
    ({"limit": "100000000000000000000"}, {"total": 0, "offset": 0, "limit": 0}),
    ({"limit": "4", "offset": str(10**20)}, {"total": 0, "offset": 0, "limit": 4}),
])
def test_malformed_params_degrade_to_empty_page(client, topic_storage, params, meta):
    r = client.get("/topics", params=params)
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "records": [], "meta": meta}
    assert topic_storage.calls == []


def test_storage_error_surfaces_as_envelope(client):
    app.dependency_overrides[get_topic_storage] = lambda: FakeTopicStorage(fail=True)
    r = client.get("/topics")
    assert r.status_code == 500
    assert r.json() == {"status": "Internal server error", "error": "connection refused"}


def test_get_a_topic(client, topic_storage):
    r = client.get("/topics/topic-3", params={"limit": 50, "offset": 9})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["record"]["slug"] == "topic-3"
    assert "description" not in body["record"]
    kind, mq, limit, offset, sort = topic_storage.calls[-1]
    assert (kind, mq.slug, limit, offset, sort) == ("meta", "topic-3", 1, 0, "-publishedDate")


def test_get_a_topic_full(client):
    r = client.get("/topics/topic-3", params={"full": "1"})
    assert r.json()["record"]["description"] == "full description 3"


def test_get_a_topic_bad_full_flag_means_meta(client, topic_storage):
    r = client.get("/topics/topic-3", params={"full": "maybe"})
    assert r.status_code == 200
    assert topic_storage.calls[-1][0] == "meta"


def test_get_a_topic_not_found(client):
    r = client.get("/topics/no-such-topic")
    assert r.status_code == 404
    assert r.json() == {"status": "Record Not Found", "error": "Record Not Found"}


def test_get_a_topic_storage_error(client):
    app.dependency_overrides[get_topic_storage] = lambda: FakeTopicStorage(fail=True)
    r = client.get("/topics/topic-1")
    assert r.status_code == 500


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_slow_storage_times_out_as_envelope(client, monkeypatch):
    monkeypatch.setenv("STORAGE_TIMEOUT_SEC", "0.05")
    get_settings.cache_clear()
    slow = FakeTopicStorage([make_topic(1)], delay=1.0)
    app.dependency_overrides[get_topic_storage] = lambda: slow

    r = client.get("/topics")
    assert r.status_code == 500
    body = r.json()
    assert body["status"] == "Internal server error"
    assert "timed out" in body["error"]
    assert len(slow.calls) == 1
