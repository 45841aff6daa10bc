"""
Autumn Moderation Bot - Cache Utilities
=======================================

Read-through cache for per-guild configuration.

DESIGN:
    CacheService sits in front of config reads only (escalation, modlog,
    word filter). Case and warning reads always hit the database.

    Three stores share one async interface:
    - NoopCacheStore: caching disabled, every read misses
    - MemoryCacheStore: in-process TTLCache, the default
    - RedisCacheStore: redis.asyncio, shared across bot instances

    The cache is best-effort. Store failures are logged and the caller
    falls back to the database; invalidation failures never fail the
    write that triggered them.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Tuple, TypeVar

import redis.asyncio as redis

from autumn.core.logger import logger

K = TypeVar("K")
V = TypeVar("V")


# =============================================================================
# In-Process TTL Cache
# =============================================================================

class TTLCache(Generic[K, V]):
    """
    A simple TTL-based cache with automatic expiration.

    Entries use the cache-wide TTL unless ``set`` is given its own.
    Safe for single-threaded async use.
    """

    def __init__(self, ttl: timedelta, max_size: int = 100):
        """
        Initialize the TTL cache.

        Args:
            ttl: Default time-to-live for cached items.
            max_size: Maximum number of items to store (oldest evicted first).
        """
        self._ttl = ttl
        self._max_size = max_size
        self._cache: Dict[K, Tuple[V, datetime]] = {}

    def get(self, key: K) -> Optional[V]:
        """Return the cached value, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if datetime.now() >= expires_at:
            self._cache.pop(key, None)
            return None

        return value

    def set(self, key: K, value: V, ttl: Optional[timedelta] = None) -> None:
        if len(self._cache) >= self._max_size and key not in self._cache:
            self._evict_oldest()

        self._cache[key] = (value, datetime.now() + (ttl or self._ttl))

    def delete(self, key: K) -> bool:
        """
        Delete an item from the cache.

        Returns:
            True if item was deleted, False if not found.
        """
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        self._cache.clear()

    def _evict_oldest(self) -> None:
        """Evict the entry closest to expiry."""
        if not self._cache:
            return
        oldest_key = min(self._cache.keys(), key=lambda k: self._cache[k][1])
        self._cache.pop(oldest_key, None)

    def __len__(self) -> int:
        return len(self._cache)


# =============================================================================
# Cache Stores
# =============================================================================

class CacheError(Exception):
    """Raised by a cache store when the backing service fails."""

    pass


class NoopCacheStore:
    """Store used when caching is disabled."""

    name = "none"

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None


class MemoryCacheStore:
    """Per-process store backed by TTLCache."""

    name = "memory"

    def __init__(self, max_size: int = 10000):
        self._cache: TTLCache[str, str] = TTLCache(ttl=timedelta(minutes=15), max_size=max_size)

    async def get(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._cache.set(key, value, ttl=timedelta(seconds=ttl_seconds))

    async def delete(self, key: str) -> None:
        self._cache.delete(key)

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self._cache.clear()


class RedisCacheStore:
    """Store backed by a Redis server through redis.asyncio."""

    name = "redis"

    def __init__(self, url: str):
        self._client: redis.Redis = redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"redis GET failed for key `{key}`: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            raise CacheError(f"redis SET failed for key `{key}`: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except redis.RedisError as e:
            raise CacheError(f"redis DEL failed for key `{key}`: {e}") from e

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except redis.RedisError as e:
            raise CacheError(f"redis PING failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()


# =============================================================================
# Cache Service
# =============================================================================

@dataclass
class CacheStats:
    hit: int = 0
    miss: int = 0
    set: int = 0
    delete: int = 0
    error: int = 0
    fallback_load: int = 0


class CacheService:
    """
    JSON cache with a key prefix and read-through loading.

    Usage:
        cache = CacheService(MemoryCacheStore(), prefix="autumn")
        config = await cache.get_or_load(
            escalation_config_key(cache, guild_id), 900, load_from_db,
        )
        await cache.invalidate(escalation_config_key(cache, guild_id))
    """

    def __init__(self, store: Any = None, prefix: str = "autumn", default_ttl: int = 900):
        self.store = store if store is not None else NoopCacheStore()
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.stats = CacheStats()

    @property
    def backend_name(self) -> str:
        return self.store.name

    def key(self, suffix: str) -> str:
        return f"{self.prefix}:{suffix}"

    # =========================================================================
    # Raw Operations (raise CacheError)
    # =========================================================================

    async def get_json(self, key: str) -> Optional[Any]:
        """
        Read and decode a JSON value.

        Returns:
            The decoded value, or None on a miss.

        Raises:
            CacheError: If the store fails or the payload is not valid JSON.
        """
        try:
            raw = await self.store.get(key)
        except CacheError:
            self.stats.error += 1
            raise

        if raw is None:
            self.stats.miss += 1
            return None

        try:
            value = json.loads(raw)
        except ValueError as e:
            self.stats.error += 1
            raise CacheError(f"failed to deserialize cache value for `{key}`: {e}") from e

        self.stats.hit += 1
        return value

    async def set_json(self, key: str, value: Any, ttl: int) -> None:
        """Encode ``value`` as JSON and store it for ``ttl`` seconds (min 1)."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"failed to serialize cache value for `{key}`: {e}") from e

        try:
            await self.store.set(key, payload, max(int(ttl), 1))
        except CacheError:
            self.stats.error += 1
            raise
        self.stats.set += 1

    async def delete(self, key: str) -> None:
        try:
            await self.store.delete(key)
        except CacheError:
            self.stats.error += 1
            raise
        self.stats.delete += 1

    # =========================================================================
    # Best-Effort Operations (never raise CacheError)
    # =========================================================================

    async def get_or_load(
        self,
        key: str,
        ttl: Optional[int],
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value for ``key`` or load, cache and return it.

        The loaded value is wrapped as ``{"value": ...}`` so that a cached
        None (e.g. "no config row") is a hit rather than a miss. Cache
        failures fall back to the loader; loader errors propagate.
        """
        try:
            cached = await self.get_json(key)
        except CacheError as e:
            logger.warning("Cache Get Failed, Falling Back To Database", [
                ("Key", key),
                ("Error", str(e)[:100]),
            ])
            cached = None

        if isinstance(cached, dict) and "value" in cached:
            return cached["value"]

        self.stats.fallback_load += 1
        loaded = await loader()

        try:
            await self.set_json(key, {"value": loaded}, ttl or self.default_ttl)
        except CacheError as e:
            logger.warning("Cache Set Failed, Returning Database Value", [
                ("Key", key),
                ("Error", str(e)[:100]),
            ])

        return loaded

    async def invalidate(self, *keys: str) -> None:
        """Delete ``keys``, logging (not raising) any store failure."""
        for key in keys:
            try:
                await self.delete(key)
            except CacheError as e:
                logger.warning("Cache Invalidation Failed", [
                    ("Key", key),
                    ("Error", str(e)[:100]),
                ])

    async def close(self) -> None:
        await self.store.close()


# =============================================================================
# Key Helpers
# =============================================================================

def escalation_config_key(cache: CacheService, guild_id: int) -> str:
    return cache.key(f"guild:{guild_id}:config:escalation")


def modlog_config_key(cache: CacheService, guild_id: int) -> str:
    return cache.key(f"guild:{guild_id}:config:modlog")


def word_filter_config_key(cache: CacheService, guild_id: int) -> str:
    return cache.key(f"guild:{guild_id}:config:word_filter")


def word_filter_words_key(cache: CacheService, guild_id: int) -> str:
    return cache.key(f"guild:{guild_id}:config:word_filter_words")


# =============================================================================
# Factory
# =============================================================================

def build_cache(
    backend: str,
    prefix: str = "autumn",
    default_ttl: int = 900,
    redis_url: Optional[str] = None,
) -> CacheService:
    """
    Build a CacheService for the configured backend.

    Args:
        backend: "memory", "redis" or "none".
        prefix: Key namespace.
        default_ttl: TTL used when a caller passes none.
        redis_url: Required for the redis backend.
    """
    if backend == "redis":
        if not redis_url:
            raise ValueError("redis cache backend requires a redis URL")
        store: Any = RedisCacheStore(redis_url)
    elif backend == "memory":
        store = MemoryCacheStore()
    else:
        store = NoopCacheStore()

    logger.tree("Cache Initialized", [
        ("Backend", store.name),
        ("Prefix", prefix),
        ("Default TTL", f"{default_ttl}s"),
    ], emoji="🧊")

    return CacheService(store, prefix=prefix, default_ttl=default_ttl)


__all__ = [
    "TTLCache",
    "CacheError",
    "NoopCacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "CacheStats",
    "CacheService",
    "escalation_config_key",
    "modlog_config_key",
    "word_filter_config_key",
    "word_filter_words_key",
    "build_cache",
]
