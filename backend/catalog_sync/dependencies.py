"""
FastAPI dependency factories for the sync and query services.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import async_session_maker, get_db
from .services.acquisition import build_mec_acquirer
from .services.cache import CacheService, get_cache
from .services.mec_query import MecQueryService
from .services.mec_sync import MecSyncService
from .services.stackoverflow_client import StackOverflowTagsClient
from .services.tech_skills_sync import TechSkillsSyncService


def get_mec_sync_service(cache: CacheService = Depends(get_cache)) -> MecSyncService:
    return MecSyncService(
        session_maker=async_session_maker,
        cache=cache,
        acquirer=build_mec_acquirer(),
    )


def get_tech_skills_sync_service(cache: CacheService = Depends(get_cache)) -> TechSkillsSyncService:
    settings = get_settings()
    return TechSkillsSyncService(
        session_maker=async_session_maker,
        cache=cache,
        client=StackOverflowTagsClient(
            api_url=settings.stackoverflow_api_url,
            max_pages=settings.stackoverflow_max_pages,
        ),
    )


def get_mec_query_service(
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> MecQueryService:
    return MecQueryService(db, cache)
