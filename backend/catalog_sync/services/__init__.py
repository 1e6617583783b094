from .cache import (
    CacheService,
    DistributedLock,
    get_cache,
    close_cache
)
from .cache_invalidation import CacheInvalidationService
from .acquisition import DatasetAcquirer, build_mec_acquirer
from .browser import PageFetcher, PlaywrightPageFetcher
from .mec_parser import ParseResult, parse_dataset
from .sync_base import BaseSyncService, RunOutcome
from .mec_sync import MecSyncService
from .mec_query import MecQueryService
from .stackoverflow_client import StackOverflowTagsClient
from .stackoverflow_parser import parse_tags
from .tech_skills_sync import TechSkillsSyncService

__all__ = [
    # Cache
    "CacheService",
    "DistributedLock",
    "get_cache",
    "close_cache",
    "CacheInvalidationService",
    # Acquisition
    "DatasetAcquirer",
    "build_mec_acquirer",
    "PageFetcher",
    "PlaywrightPageFetcher",
    # MEC
    "ParseResult",
    "parse_dataset",
    "MecSyncService",
    "MecQueryService",
    # Tech skills
    "StackOverflowTagsClient",
    "parse_tags",
    "TechSkillsSyncService",
    # Orchestration
    "BaseSyncService",
    "RunOutcome",
]
