"""
Tests for the facet terms cache.

Redis is replaced by a dict-backed mock of the client.
"""

import json
from unittest import mock

import pytest
import redis

from dataportal.api.services.terms_cache import TermsCache


@pytest.fixture
def redis_client():
    store = {}
    client = mock.Mock(spec=redis.Redis)
    client.get.side_effect = store.get
    client.setex.side_effect = lambda key, ttl, value: store.__setitem__(key, value)
    client.scan_iter.side_effect = lambda match: [k for k in list(store) if k.startswith(match[:-1])]
    client.delete.side_effect = lambda *keys: sum(store.pop(k, None) is not None for k in keys)
    client.store = store
    return client


def test_loader_called_once_within_ttl(redis_client):
    cache = TermsCache(redis_client, ttl_seconds=60)
    loader = mock.Mock(return_value=["AWI", "PANGAEA"])
    key = cache.make_key("dataportal", "dataCenterFull", 65536)

    assert cache.get_or_load(key, loader) == ["AWI", "PANGAEA"]
    assert cache.get_or_load(key, loader) == ["AWI", "PANGAEA"]

    loader.assert_called_once()
    redis_client.setex.assert_called_once_with(key, 60, json.dumps(["AWI", "PANGAEA"]))
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["backend"] == "redis"


def test_keys_include_prefix_and_count(redis_client):
    cache = TermsCache(redis_client)

    assert cache.make_key("dataportal", "dataCenterFull", 10, "PAN") != cache.make_key(
        "dataportal", "dataCenterFull", 10
    )
    assert cache.make_key("dataportal", "dataCenterFull", 10).startswith("dataportal:terms:")


def test_zero_ttl_disables_caching(redis_client):
    cache = TermsCache(redis_client, ttl_seconds=0)
    loader = mock.Mock(return_value=[])

    cache.get_or_load("key", loader)
    cache.get_or_load("key", loader)

    assert loader.call_count == 2
    redis_client.get.assert_not_called()
    assert cache.get_stats()["enabled"] is False


def test_without_redis_client():
    cache = TermsCache(None, ttl_seconds=60)
    loader = mock.Mock(return_value=["AWI"])

    assert cache.get_or_load("key", loader) == ["AWI"]
    assert cache.get_stats()["backend"] == "none"
    assert cache.clear() == 0


def test_redis_down_falls_back_to_loader(redis_client):
    redis_client.get.side_effect = redis.ConnectionError("refused")
    redis_client.setex.side_effect = redis.ConnectionError("refused")
    cache = TermsCache(redis_client, ttl_seconds=60)
    loader = mock.Mock(return_value=["AWI"])

    assert cache.get_or_load("key", loader) == ["AWI"]
    assert cache.get_or_load("key", loader) == ["AWI"]

    assert loader.call_count == 2
    assert cache.get_stats()["errors"] == 4


def test_unreadable_entry_is_reloaded(redis_client):
    redis_client.store["key"] = b"not json"
    cache = TermsCache(redis_client, ttl_seconds=60)
    loader = mock.Mock(return_value=["AWI"])

    assert cache.get_or_load("key", loader) == ["AWI"]
    loader.assert_called_once()


def test_loader_errors_are_not_cached(redis_client):
    cache = TermsCache(redis_client, ttl_seconds=60)
    loader = mock.Mock(side_effect=[RuntimeError("down"), ["AWI"]])

    with pytest.raises(RuntimeError):
        cache.get_or_load("key", loader)

    redis_client.setex.assert_not_called()
    assert cache.get_or_load("key", loader) == ["AWI"]


def test_clear_only_touches_own_namespace(redis_client):
    redis_client.store["other:key"] = b"[]"
    cache = TermsCache(redis_client, ttl_seconds=60)
    cache.get_or_load(cache.make_key("dataportal", "dataCenterFull", 10), lambda: ["AWI"])

    assert cache.clear() == 1
    assert list(redis_client.store) == ["other:key"]
