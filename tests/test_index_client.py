"""Tests for services.index_client."""

import json

import pytest
import requests

from core.exceptions import IndexLoadError
from core.models import EntityDescriptor
from services.index_client import IndexClient

INDEX_URL = "https://example.test/index.json"
RECORDS = [
    {"name": "acme", "URL": "http://x/acme.zip", "count": 10, "bounty": True},
    {"name": "empty", "URL": "", "count": 3},
    {"name": "nocount", "URL": "http://x/nocount.zip"},
]


def test_fetch_and_load(tmp_path, fake_session, fake_response):
    session = fake_session({INDEX_URL: fake_response(200, json.dumps(RECORDS).encode())})
    client = IndexClient(INDEX_URL, tmp_path / "index.json", session=session)

    entities = client.get_entities()

    assert client.is_cached
    assert entities == [
        EntityDescriptor("acme", "http://x/acme.zip", 10),
        EntityDescriptor("empty", "", 3),
        EntityDescriptor("nocount", "http://x/nocount.zip", 0),
    ]
    assert [e.is_fetchable for e in entities] == [True, False, False]


def test_cached_index_is_not_refetched(tmp_path, fake_session):
    cache = tmp_path / "index.json"
    cache.write_text(json.dumps(RECORDS[:1]))
    session = fake_session({})

    entities = IndexClient(INDEX_URL, cache, session=session).get_entities()

    assert session.calls == []
    assert [e.name for e in entities] == ["acme"]


def test_refresh_replaces_cache(tmp_path, fake_session, fake_response):
    cache = tmp_path / "index.json"
    cache.write_text("[]")
    session = fake_session({INDEX_URL: fake_response(200, json.dumps(RECORDS).encode())})

    entities = IndexClient(INDEX_URL, cache, session=session).get_entities(refresh=True)

    assert session.calls == [INDEX_URL]
    assert len(entities) == 3


def test_http_error_is_index_load_error(tmp_path, fake_session, fake_response):
    client = IndexClient(INDEX_URL, tmp_path / "index.json", session=fake_session({INDEX_URL: fake_response(500)}))

    with pytest.raises(IndexLoadError):
        client.get_entities()
    assert not client.is_cached


def test_transport_error_is_index_load_error(tmp_path, fake_session):
    session = fake_session({INDEX_URL: requests.ConnectionError("dns")})

    with pytest.raises(IndexLoadError):
        IndexClient(INDEX_URL, tmp_path / "index.json", session=session).get_entities()


@pytest.mark.parametrize("content", ["{not json", '{"name": "acme"}'])
def test_malformed_cache_is_index_load_error(tmp_path, fake_session, content):
    cache = tmp_path / "index.json"
    cache.write_text(content)

    with pytest.raises(IndexLoadError):
        IndexClient(INDEX_URL, cache, session=fake_session({})).load_index()
