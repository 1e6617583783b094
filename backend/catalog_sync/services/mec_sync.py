"""
MEC Sync Service - loads the MEC higher-education dataset into
mec_institutions / mec_courses.

Insert-only: rows already stored (by codigo_ies / codigo_curso) are left
untouched, so running the sync again against the same dataset inserts nothing.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings
from ..constants import MEC_SYNC_LOCK_KEY, MEC_SYNC_METADATA_KEY
from ..models.mec import MecInstitution, MecCourse
from ..models.sync_log import SyncSource
from ..schemas.mec import NormalizedInstitution, NormalizedCourse
from .acquisition import DatasetAcquirer
from .bulk_store import fetch_existing_keys, insert_skip_duplicates
from .cache import CacheService
from .cache_invalidation import CacheInvalidationService
from .csv_tokenizer import decode_bytes
from .mec_parser import ParseResult, parse_dataset
from .sync_base import BaseSyncService, RunOutcome

logger = logging.getLogger(__name__)


def _parse_payload(payload: bytes) -> ParseResult:
    return parse_dataset(decode_bytes(payload), len(payload))


class MecSyncService(BaseSyncService):
    source = SyncSource.MEC
    lock_key = MEC_SYNC_LOCK_KEY
    metadata_key = MEC_SYNC_METADATA_KEY
    log_tag = "[MEC-SYNC]"

    def __init__(
        self,
        session_maker: async_sessionmaker,
        cache: CacheService,
        acquirer: DatasetAcquirer,
        invalidator: Optional[CacheInvalidationService] = None,
        settings: Optional[Settings] = None,
        source_url: Optional[str] = None,
    ):
        super().__init__(session_maker, cache, invalidator, settings)
        self.acquirer = acquirer
        self.source_url = source_url or self.settings.mec_csv_url

    async def run(self) -> RunOutcome:
        payload = await self.acquirer.acquire(self.source_url)
        # Tens of MB of text; keep the event loop free while parsing
        parsed = await asyncio.to_thread(_parse_payload, payload)

        institutions_inserted = await self.sync_institutions(parsed.institutions)
        courses_inserted = await self.sync_courses(parsed.courses)

        return RunOutcome(
            parents_inserted=institutions_inserted,
            children_inserted=courses_inserted,
            total_parents=len(parsed.institutions),
            total_children=len(parsed.courses),
            total_rows=parsed.total_rows,
            errors=parsed.errors,
            file_size=parsed.file_size,
        )

    async def invalidate_caches(self) -> None:
        await self.invalidator.invalidate_mec()

    async def sync_institutions(self, institutions: Dict[int, NormalizedInstitution]) -> int:
        async with self.session_maker() as session:
            existing = await fetch_existing_keys(session, MecInstitution.codigo_ies)
            new_rows = [
                institution.model_dump()
                for codigo_ies, institution in institutions.items()
                if codigo_ies not in existing
            ]
            logger.info(
                f"{self.log_tag} Institutions: {len(existing)} existing, {len(new_rows)} new"
            )
            return await insert_skip_duplicates(
                session, MecInstitution, "codigo_ies", new_rows, self.settings.sync_batch_size
            )

    async def sync_courses(self, courses: List[NormalizedCourse]) -> int:
        async with self.session_maker() as session:
            existing = await fetch_existing_keys(session, MecCourse.codigo_curso)
            # Read after the institution pass so newly inserted parents count
            valid_ies = await fetch_existing_keys(session, MecInstitution.codigo_ies)

            new_rows = []
            orphaned = 0
            for course in courses:
                if course.codigo_curso in existing:
                    continue
                if course.codigo_ies not in valid_ies:
                    orphaned += 1
                    continue
                new_rows.append(course.model_dump())

            logger.info(
                f"{self.log_tag} Courses: {len(existing)} existing, {len(new_rows)} new, "
                f"{orphaned} skipped without institution"
            )
            return await insert_skip_duplicates(
                session, MecCourse, "codigo_curso", new_rows, self.settings.sync_batch_size
            )
