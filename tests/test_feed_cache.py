# tests/test_feed_cache.py
"""Tests for the ranked feed cache backends."""

from unittest.mock import MagicMock

import redis

from babel_board.services.feed_cache import (
    MemoryFeedCache,
    NullFeedCache,
    RedisFeedCache,
    build_feed_cache,
    feed_cache_key,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_memory_cache_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = MemoryFeedCache(clock=clock)

    cache.set("k", "v", ttl_seconds=60)
    clock.now += 59
    assert cache.get("k") == "v"

    clock.now += 1
    assert cache.get("k") is None


def test_memory_cache_ignores_non_positive_ttl() -> None:
    cache = MemoryFeedCache()
    cache.set("k", "v", ttl_seconds=0)
    assert cache.get("k") is None


def test_null_cache_never_stores() -> None:
    cache = NullFeedCache()
    cache.set("k", "v", ttl_seconds=60)
    assert cache.get("k") is None


def test_redis_cache_reads_and_writes_with_expiry() -> None:
    client = MagicMock()
    client.get.return_value = b"payload"
    cache = RedisFeedCache(client)

    cache.set("k", "payload", ttl_seconds=30)

    client.set.assert_called_once_with("k", "payload", ex=30)
    assert cache.get("k") == "payload"


def test_redis_outage_degrades_to_miss() -> None:
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    cache = RedisFeedCache(client)

    cache.set("k", "v", ttl_seconds=30)
    assert cache.get("k") is None


def test_feed_cache_key_is_namespaced() -> None:
    assert feed_cache_key("ranked", 7, 500) == "feed:ranked:7:500"


def test_build_feed_cache_selects_backend() -> None:
    assert isinstance(build_feed_cache("none"), NullFeedCache)
    assert isinstance(build_feed_cache("memory"), MemoryFeedCache)
