"""Redis-based cache for read-only roster data."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import ConnectionError, RedisError

from sentrydash.core.config import settings

logger = logging.getLogger(__name__)


class _InMemoryCache:
    """Fallback in-memory cache when Redis is unavailable."""

    def __init__(self):
        self._cache: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._cache.get(key)

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> None:
        self._cache[key] = value

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)


def _connect(url: str, timeout: Optional[float] = None) -> redis.Redis | _InMemoryCache:
    if not url:
        logger.info("Redis cache disabled, using in-memory cache")
        return _InMemoryCache()
    try:
        pool = redis.ConnectionPool.from_url(
            url,
            max_connections=50,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        client = redis.Redis(connection_pool=pool)
        client.ping()
        logger.info(f"Redis cache connected: {url}")
        return client
    except (ConnectionError, RedisError) as e:
        logger.warning(f"Failed to connect to Redis cache: {e}. Using fallback in-memory cache.")
        return _InMemoryCache()


class RedisCache:
    """Redis-based cache with TTL support."""

    def __init__(self, url: str, default_ttl: int = 300, timeout: Optional[float] = None):
        """
        Initialize cache.

        Args:
            url: Redis URL; an empty string selects the in-memory fallback
            default_ttl: Default time-to-live in seconds (default: 5 minutes)
            timeout: Socket timeout in seconds for Redis calls
        """
        self.default_ttl = default_ttl
        self._client = _connect(url, timeout)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        try:
            if isinstance(self._client, _InMemoryCache):
                return self._client.get(key)

            value = self._client.get(key)
            if value is None:
                return None

            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache get error for key {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set value in cache with TTL."""
        try:
            ttl = ttl or self.default_ttl

            if isinstance(self._client, _InMemoryCache):
                self._client.set(key, value, ex=ttl)
                return

            if isinstance(value, (dict, list)):
                serialized = json.dumps(value)
            else:
                serialized = str(value)

            self._client.setex(key, ttl, serialized)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache set error for key {key}: {e}")

    def delete(self, key: str) -> None:
        """Delete key from cache."""
        try:
            self._client.delete(key)
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis cache delete error for key {key}: {e}")


_cache: Optional[RedisCache] = None


def get_cache() -> RedisCache:
    """Return the process-wide cache, connecting on first use."""
    global _cache
    if _cache is None:
        _cache = RedisCache(
            settings.REDIS_CACHE_URL,
            default_ttl=settings.ROSTER_CACHE_TTL_SECONDS,
            timeout=settings.CACHE_TIMEOUT_SECONDS,
        )
    return _cache


def reset_cache() -> None:
    """Drop the process-wide cache so the next call reconnects."""
    global _cache
    _cache = None


def profile_cache_key(profile_id: str) -> str:
    return f"profile:{profile_id}"
