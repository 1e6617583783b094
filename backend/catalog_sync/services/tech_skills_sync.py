"""
Tech Skills Sync Service - loads popular Stack Overflow tags into tech_skills.
Insert-only by slug, same lock and run log discipline as the MEC sync.
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings
from ..constants import TECH_SKILLS_SYNC_LOCK_KEY, TECH_SKILLS_SYNC_METADATA_KEY
from ..models.sync_log import SyncSource
from ..models.tech_skill import TechSkill
from ..schemas.tech_skill import ParsedSkill
from .bulk_store import fetch_existing_keys, insert_skip_duplicates
from .cache import CacheService
from .cache_invalidation import CacheInvalidationService
from .stackoverflow_client import StackOverflowTagsClient
from .stackoverflow_parser import parse_tags
from .sync_base import BaseSyncService, RunOutcome

logger = logging.getLogger(__name__)


class TechSkillsSyncService(BaseSyncService):
    source = SyncSource.TECH_SKILLS
    lock_key = TECH_SKILLS_SYNC_LOCK_KEY
    metadata_key = TECH_SKILLS_SYNC_METADATA_KEY
    log_tag = "[TECH-SKILLS]"

    def __init__(
        self,
        session_maker: async_sessionmaker,
        cache: CacheService,
        client: StackOverflowTagsClient,
        invalidator: Optional[CacheInvalidationService] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(session_maker, cache, invalidator, settings)
        self.client = client

    async def run(self) -> RunOutcome:
        tags = await self.client.fetch_tags()
        skills, _ = parse_tags(tags)
        inserted = await self.sync_skills(skills)
        return RunOutcome(
            parents_inserted=inserted,
            total_parents=len(skills),
            total_rows=len(tags),
        )

    async def invalidate_caches(self) -> None:
        await self.invalidator.invalidate_tech_skills()

    async def sync_skills(self, skills: List[ParsedSkill]) -> int:
        async with self.session_maker() as session:
            existing = await fetch_existing_keys(session, TechSkill.slug)
            new_rows = [skill.model_dump() for skill in skills if skill.slug not in existing]
            logger.info(f"{self.log_tag} Skills: {len(existing)} existing, {len(new_rows)} new")
            return await insert_skip_duplicates(
                session, TechSkill, "slug", new_rows, self.settings.sync_batch_size
            )
