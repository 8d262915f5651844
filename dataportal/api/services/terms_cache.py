"""
Terms Cache
Redis-backed cache for term listings used by the facet selector.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import redis

logger = logging.getLogger(__name__)


class CacheStatistics:
    """Track cache hits, misses and Redis errors."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.start_time = time.time()

    def record_hit(self):
        self.hits += 1

    def record_miss(self):
        self.misses += 1

    def record_error(self):
        self.errors += 1

    def get_hit_rate(self) -> float:
        """Calculate overall hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0


class TermsCache:
    """
    Caches term listings in Redis for a fixed time.

    Listing all terms of a facet field is one remote call per page render;
    the list changes only when the index is rebuilt. When Redis is down the
    listing is loaded from the search service on every call.
    """

    def __init__(
        self,
        client: Optional[redis.Redis],
        ttl_seconds: int = 300,
        namespace: str = "dataportal:terms",
    ):
        """
        Initialize terms cache.

        Args:
            client: Redis client (None disables caching)
            ttl_seconds: Time to live of an entry (0 disables caching)
            namespace: Prefix of all keys written by this cache
        """
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self.stats = CacheStatistics()

    @property
    def enabled(self) -> bool:
        return self.client is not None and self.ttl_seconds > 0

    def make_key(self, index: str, field: str, count: int, prefix: Optional[str] = None) -> str:
        return f"{self.namespace}:{index}:{field}:{count}:{prefix or ''}"

    def _get(self, key: str) -> Optional[List[str]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as e:
            self.stats.record_error()
            logger.warning(f"Redis GET error for key '{key}': {e}")
            return None
        if data is None:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            self.stats.record_error()
            logger.warning(f"Discarding unreadable cache entry '{key}': {e}")
            return None

    def _set(self, key: str, terms: List[str]) -> None:
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(terms))
        except redis.RedisError as e:
            self.stats.record_error()
            logger.warning(f"Redis SETEX error for key '{key}': {e}")

    def get_or_load(self, key: str, loader: Callable[[], List[str]]) -> List[str]:
        """
        Return cached terms for key, calling loader on a miss.

        Errors raised by the loader propagate and nothing is cached.
        """
        if not self.enabled:
            return loader()

        terms = self._get(key)
        if terms is not None:
            self.stats.record_hit()
            return terms
        self.stats.record_miss()

        terms = loader()
        self._set(key, terms)
        logger.debug(f"Cached {len(terms)} terms for {key}")
        return terms

    def clear(self) -> int:
        """Delete all entries of this cache. Returns the number of keys deleted."""
        if self.client is None:
            return 0
        try:
            keys = list(self.client.scan_iter(match=f"{self.namespace}:*"))
            return self.client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            self.stats.record_error()
            logger.warning(f"Redis error clearing {self.namespace}: {e}")
            return 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "enabled": self.enabled,
            "backend": "redis" if self.client is not None else "none",
            "ttl_seconds": self.ttl_seconds,
            "hits": self.stats.hits,
            "misses": self.stats.misses,
            "errors": self.stats.errors,
            "hit_rate_percent": self.stats.get_hit_rate(),
            "uptime_seconds": time.time() - self.stats.start_time,
        }
