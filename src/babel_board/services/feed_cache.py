"""Short-lived cache for computed ranked feeds.

The ranking engine itself stays pure; callers inject a ``FeedCache`` and
accept bounded staleness. Entries expire on a TTL only, nothing is
invalidated by writes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock
from typing import Protocol

import redis

from babel_board.core.settings import settings

logger = logging.getLogger(__name__)

_KEY_PREFIX = "feed"


class FeedCache(Protocol):
    """Minimal get / set-with-ttl interface used by the feed service."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...


class NullFeedCache:
    """Cache that never stores anything; every request recomputes."""

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None


class MemoryFeedCache:
    """In-process TTL cache suitable for a single worker and for tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = Lock()
        self._entries: dict[str, tuple[float, str]] = {}

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()


class RedisFeedCache:
    """Redis-backed cache shared by every worker.

    Redis outages degrade to cache misses; the feed is recomputed instead of
    failing the request.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisFeedCache:
        return cls(redis.from_url(url))

    def get(self, key: str) -> str | None:
        try:
            value = self._redis.get(key)
        except redis.RedisError as exc:
            logger.warning("Feed cache read failed for %s: %s", key, exc)
            return None
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        try:
            self._redis.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            logger.warning("Feed cache write failed for %s: %s", key, exc)


def feed_cache_key(feed: str, *parts: object) -> str:
    """Build a namespaced cache key such as ``feed:ranked:7:500``."""
    return ":".join([_KEY_PREFIX, feed, *(str(part) for part in parts)])


def build_feed_cache(backend: str | None = None) -> FeedCache:
    """Return a cache for the configured backend."""
    choice = (backend or settings.feed_cache_backend).lower()
    if choice == "redis":
        return RedisFeedCache.from_url(settings.redis_url)
    if choice == "none":
        return NullFeedCache()
    return MemoryFeedCache()


_feed_cache: FeedCache | None = None


def get_feed_cache() -> FeedCache:
    """Return the process-wide feed cache."""
    global _feed_cache
    if _feed_cache is None:
        _feed_cache = build_feed_cache()
    return _feed_cache
