"""
Cache Service - Redis-backed key-value cache and distributed lock.

Values are stored as JSON. Reads and writes are best-effort: a Redis failure
is logged and behaves like a cache miss. Lock acquisition fails safe: if
Redis cannot be reached the lock is reported as NOT acquired.
"""
import json
import logging
import uuid
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ..config import get_settings
from ..exceptions import SyncInProgressError

logger = logging.getLogger(__name__)

# Keys are deleted in chunks while scanning a pattern
DELETE_CHUNK_SIZE = 500


class CacheService:
    def __init__(self, client):
        self.client = client

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.warning(f"[CACHE] GET {key} failed: {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"[CACHE] Discarding undecodable value at {key}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        payload = json.dumps(value, default=str)
        try:
            await self.client.set(key, payload, ex=ttl_seconds)
            return True
        except RedisError as e:
            logger.warning(f"[CACHE] SET {key} failed: {e}")
            return False

    async def delete(self, key: str) -> int:
        return await self.client.delete(key)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern (SCAN based, never KEYS)."""
        deleted = 0
        batch = []
        async for key in self.client.scan_iter(match=pattern, count=DELETE_CHUNK_SIZE):
            batch.append(key)
            if len(batch) >= DELETE_CHUNK_SIZE:
                deleted += await self.client.delete(*batch)
                batch = []
        if batch:
            deleted += await self.client.delete(*batch)
        return deleted

    async def acquire_lock(self, key: str, ttl_seconds: int, token: str) -> bool:
        """Atomic set-if-absent with TTL."""
        try:
            return bool(await self.client.set(key, token, nx=True, ex=ttl_seconds))
        except RedisError as e:
            logger.error(f"[CACHE] Could not acquire lock {key}: {e}")
            return False

    async def release_lock(self, key: str, token: Optional[str] = None) -> bool:
        """Release a lock. With a token, only the owner's lock is deleted."""
        try:
            if token is not None:
                current = await self.client.get(key)
                if current != token:
                    logger.warning(f"[CACHE] Lock {key} is no longer owned by this run, leaving it")
                    return False
            await self.client.delete(key)
            return True
        except RedisError as e:
            # The TTL still expires the lock
            logger.error(f"[CACHE] Could not release lock {key}: {e}")
            return False

    async def is_locked(self, key: str) -> bool:
        try:
            return bool(await self.client.exists(key))
        except RedisError as e:
            logger.warning(f"[CACHE] Could not read lock {key}: {e}")
            return False


class DistributedLock:
    """
    Named mutex held in the shared cache for at most `ttl_seconds`.

    Usage:
        async with DistributedLock(cache, "mec:sync:lock", 3600):
            ...  # raises SyncInProgressError if another holder exists
    """

    def __init__(self, cache: CacheService, key: str, ttl_seconds: int):
        self.cache = cache
        self.key = key
        self.ttl_seconds = ttl_seconds
        self.token = uuid.uuid4().hex
        self.acquired = False

    async def try_acquire(self) -> bool:
        self.acquired = await self.cache.acquire_lock(self.key, self.ttl_seconds, self.token)
        return self.acquired

    async def release(self) -> None:
        if not self.acquired:
            return
        await self.cache.release_lock(self.key, self.token)
        self.acquired = False

    async def __aenter__(self) -> "DistributedLock":
        if not await self.try_acquire():
            raise SyncInProgressError(
                "Sync already in progress. Please wait for the current sync to complete."
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()


# Lazy initialization of the shared Redis client
_cache_service: Optional[CacheService] = None


def get_cache() -> CacheService:
    """Get the shared cache service, connecting lazily on first use."""
    global _cache_service
    if _cache_service is None:
        settings = get_settings()
        client = aioredis.from_url(settings.redis_url, decode_responses=True)
        _cache_service = CacheService(client)
    return _cache_service


async def close_cache() -> None:
    global _cache_service
    if _cache_service is not None:
        await _cache_service.client.aclose()
        _cache_service = None
