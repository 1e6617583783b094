"""
Sync orchestration shared by every dataset.

A run goes IDLE -> LOCK_ACQUIRED -> RUNNING -> SUCCESS | FAILED -> LOCK_RELEASED:
the distributed lock is taken, a RUNNING SyncLog is committed, the dataset
specific work runs, caches are purged, metadata is written and the log is
finalized. The lock is released on every path.
"""
import time
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings, get_settings
from ..exceptions import SyncInProgressError, PersistenceError
from ..models.sync_log import SyncLog, SyncStatus, SyncSource
from ..schemas.sync import SyncError, SyncResult, SyncMetadata
from .cache import CacheService, DistributedLock
from .cache_invalidation import CacheInvalidationService

logger = logging.getLogger(__name__)

IN_PROGRESS_MESSAGE = "Sync already in progress. Please wait for the current sync to complete."


@dataclass
class RunOutcome:
    """What the dataset specific part of a run produced."""
    parents_inserted: int = 0
    children_inserted: int = 0
    total_parents: int = 0
    total_children: int = 0
    total_rows: int = 0
    errors: List[SyncError] = field(default_factory=list)
    file_size: Optional[int] = None


class BaseSyncService:
    """
    Subclasses set `source`, `lock_key`, `metadata_key` and implement
    `run()` and `invalidate_caches()`.
    """

    source: SyncSource
    lock_key: str
    metadata_key: str
    log_tag = "[SYNC]"

    def __init__(
        self,
        session_maker: async_sessionmaker,
        cache: CacheService,
        invalidator: Optional[CacheInvalidationService] = None,
        settings: Optional[Settings] = None,
    ):
        self.session_maker = session_maker
        self.cache = cache
        self.invalidator = invalidator or CacheInvalidationService(cache)
        self.settings = settings or get_settings()

    async def run(self) -> RunOutcome:
        raise NotImplementedError

    async def invalidate_caches(self) -> None:
        raise NotImplementedError

    async def sync(self, triggered_by: str = "manual") -> SyncResult:
        """
        Run one sync.

        Raises:
            SyncInProgressError: another run holds the lock (no SyncLog is written)
            PersistenceError: the relational store failed
            Any error raised while acquiring or parsing, after the run is marked failed
        """
        start = time.monotonic()
        lock = DistributedLock(self.cache, self.lock_key, self.settings.sync_lock_ttl_seconds)

        if not await lock.try_acquire():
            logger.warning(f"{self.log_tag} Sync already in progress, skipping")
            raise SyncInProgressError(IN_PROGRESS_MESSAGE)

        try:
            sync_log_id = await self._create_sync_log(triggered_by)
            logger.info(f"{self.log_tag} Starting sync #{sync_log_id} (triggered by {triggered_by})")

            try:
                outcome = await self.run()
                await self.invalidate_caches()
                await self._finalize_success(sync_log_id, outcome)
            except Exception as e:
                duration_ms = self._elapsed_ms(start)
                logger.exception(f"{self.log_tag} Sync #{sync_log_id} failed after {duration_ms}ms: {e}")
                await self._record_failure(sync_log_id, e, triggered_by, duration_ms)
                raise

            duration_ms = self._elapsed_ms(start)
            await self._write_metadata(
                status="partial" if outcome.errors else "success",
                duration_ms=duration_ms,
                triggered_by=triggered_by,
                outcome=outcome,
            )

            logger.info(
                f"{self.log_tag} Sync #{sync_log_id} completed in {duration_ms}ms: "
                f"{outcome.parents_inserted} parents, {outcome.children_inserted} children inserted, "
                f"{len(outcome.errors)} errors"
            )
            return SyncResult(
                sync_log_id=sync_log_id,
                parents_inserted=outcome.parents_inserted,
                children_inserted=outcome.children_inserted,
                total_rows_processed=outcome.total_rows,
                duration_ms=duration_ms,
                errors=outcome.errors,
            )
        finally:
            await lock.release()

    # ========== Run log ==========

    async def _create_sync_log(self, triggered_by: str) -> int:
        try:
            async with self.session_maker() as session:
                sync_log = SyncLog(
                    source=self.source,
                    status=SyncStatus.RUNNING,
                    triggered_by=triggered_by,
                )
                session.add(sync_log)
                await session.commit()
                return sync_log.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not create sync log: {e}") from e

    async def _finalize_success(self, sync_log_id: int, outcome: RunOutcome) -> None:
        try:
            async with self.session_maker() as session:
                sync_log = await session.get(SyncLog, sync_log_id)
                sync_log.status = SyncStatus.SUCCESS
                sync_log.parents_inserted = outcome.parents_inserted
                sync_log.children_inserted = outcome.children_inserted
                sync_log.total_rows_processed = outcome.total_rows
                sync_log.errors_count = len(outcome.errors)
                sync_log.source_file_size = outcome.file_size
                sync_log.completed_at = datetime.now(timezone.utc)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not finalize sync log #{sync_log_id}: {e}") from e

    async def _record_failure(
        self, sync_log_id: int, error: Exception, triggered_by: str, duration_ms: int
    ) -> None:
        # The original error is re-raised by the caller; problems recording it are only logged
        await self._write_metadata(
            status="failed",
            duration_ms=duration_ms,
            triggered_by=triggered_by,
            outcome=RunOutcome(),
        )
        try:
            async with self.session_maker() as session:
                sync_log = await session.get(SyncLog, sync_log_id)
                sync_log.status = SyncStatus.FAILED
                sync_log.error_message = str(error) or type(error).__name__
                sync_log.error_details = {
                    "type": type(error).__name__,
                    "traceback": traceback.format_exception(type(error), error, error.__traceback__),
                }
                sync_log.completed_at = datetime.now(timezone.utc)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"{self.log_tag} Could not mark sync #{sync_log_id} as failed: {e}")

    # ========== Metadata ==========

    async def _write_metadata(
        self, status: str, duration_ms: int, triggered_by: str, outcome: RunOutcome
    ) -> None:
        metadata = SyncMetadata(
            last_sync_at=datetime.now(timezone.utc),
            last_sync_status=status,
            last_sync_duration_ms=duration_ms,
            total_parents=outcome.total_parents,
            total_children=outcome.total_children,
            errors_count=len(outcome.errors),
            triggered_by=triggered_by,
        )
        await self.cache.set(
            self.metadata_key,
            metadata.model_dump(mode="json"),
            self.settings.sync_metadata_ttl_seconds,
        )

    async def get_sync_metadata(self) -> Optional[SyncMetadata]:
        data = await self.cache.get(self.metadata_key)
        if not data:
            return None
        return SyncMetadata(**data)

    async def is_sync_running(self) -> bool:
        return await self.cache.is_locked(self.lock_key)

    async def get_last_sync_log(self) -> Optional[SyncLog]:
        history = await self.get_sync_history(limit=1)
        return history[0] if history else None

    async def get_sync_history(self, limit: int = 10) -> List[SyncLog]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(SyncLog)
                .where(SyncLog.source == self.source)
                .order_by(SyncLog.created_at.desc(), SyncLog.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
