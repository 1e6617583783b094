"""
Cache Invalidation Service - purges cached read-side entries after a sync.

Every deletion is guarded on its own: a failing key or pattern is logged and
the remaining deletions still run. Nothing here raises.
"""
import asyncio
import logging

from ..constants import (
    MEC_INSTITUTIONS_LIST_KEY,
    MEC_INSTITUTIONS_BY_UF_PREFIX,
    MEC_COURSES_BY_IES_PREFIX,
    MEC_COURSES_SEARCH_PREFIX,
    TECH_SKILLS_LIST_KEY,
    TECH_SKILLS_PREFIX,
)
from .cache import CacheService

logger = logging.getLogger(__name__)


class CacheInvalidationService:
    def __init__(self, cache: CacheService):
        self.cache = cache

    async def invalidate_mec(self) -> None:
        """Drop institution listings and course lookups that a MEC sync can make stale."""
        logger.info("[CACHE] Invalidating MEC caches...")
        await asyncio.gather(
            self.safe_delete(MEC_INSTITUTIONS_LIST_KEY),
            self.safe_delete_pattern(f"{MEC_INSTITUTIONS_BY_UF_PREFIX}*"),
            self.safe_delete_pattern(f"{MEC_COURSES_BY_IES_PREFIX}*"),
            self.safe_delete_pattern(f"{MEC_COURSES_SEARCH_PREFIX}*"),
        )
        logger.info("[CACHE] MEC caches invalidated")

    async def invalidate_tech_skills(self) -> None:
        logger.info("[CACHE] Invalidating tech skills caches...")
        await asyncio.gather(
            self.safe_delete(TECH_SKILLS_LIST_KEY),
            self.safe_delete_pattern(f"{TECH_SKILLS_PREFIX}*"),
        )

    async def safe_delete(self, key: str) -> None:
        try:
            await self.cache.delete(key)
        except Exception as e:
            logger.warning(f"[CACHE] Failed to delete {key}: {e}")

    async def safe_delete_pattern(self, pattern: str) -> None:
        try:
            deleted = await self.cache.delete_pattern(pattern)
            logger.debug(f"[CACHE] Deleted {deleted} keys matching {pattern}")
        except Exception as e:
            logger.warning(f"[CACHE] Failed to delete pattern {pattern}: {e}")
