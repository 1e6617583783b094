"""Integration tests for the MEC sync against SQLite and an in-memory Redis."""
import asyncio

import pytest
from sqlalchemy import select, func

from catalog_sync.constants import MEC_SYNC_LOCK_KEY, MEC_SYNC_METADATA_KEY
from catalog_sync.exceptions import AcquisitionError, PersistenceError, SyncInProgressError
from catalog_sync.models.mec import MecInstitution, MecCourse
from catalog_sync.models.sync_log import SyncLog, SyncStatus, SyncSource
from catalog_sync.services.mec_sync import MecSyncService
from tests.support import MEC_ROWS, StubAcquirer, build_mec_csv


def _service(session_maker, cache, settings, acquirer):
    return MecSyncService(session_maker, cache, acquirer, settings=settings)


async def _count(session_maker, column):
    async with session_maker() as session:
        return await session.scalar(select(func.count(column)))


async def _sync_logs(session_maker):
    async with session_maker() as session:
        result = await session.execute(select(SyncLog).order_by(SyncLog.id))
        return list(result.scalars().all())


async def test_first_sync_inserts_institutions_and_courses(session_maker, cache, settings) -> None:
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    result = await service.sync("manual")

    assert result.parents_inserted == 3
    assert result.children_inserted == 4
    assert result.total_rows_processed == 4
    assert result.errors == []
    assert await _count(session_maker, MecInstitution.id) == 3
    assert await _count(session_maker, MecCourse.id) == 4

    logs = await _sync_logs(session_maker)
    assert len(logs) == 1
    assert logs[0].id == result.sync_log_id
    assert logs[0].source == SyncSource.MEC
    assert logs[0].status == SyncStatus.SUCCESS
    assert logs[0].parents_inserted == 3
    assert logs[0].children_inserted == 4
    assert logs[0].source_file_size == len(build_mec_csv())
    assert logs[0].completed_at is not None


async def test_second_sync_is_a_no_op(session_maker, cache, settings) -> None:
    """Re-running against the same dataset inserts nothing and changes no counts."""
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))
    await service.sync()

    result = await service.sync()

    assert result.parents_inserted == 0
    assert result.children_inserted == 0
    assert await _count(session_maker, MecInstitution.id) == 3
    assert await _count(session_maker, MecCourse.id) == 4
    assert len(await service.get_sync_history()) == 2


async def test_existing_rows_are_never_updated(session_maker, cache, settings) -> None:
    async with session_maker() as session:
        session.add(MecInstitution(codigo_ies=1, nome="Nome Antigo", uf="MT"))
        await session.commit()
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    result = await service.sync()

    assert result.parents_inserted == 2
    async with session_maker() as session:
        institution = await session.scalar(select(MecInstitution).where(MecInstitution.codigo_ies == 1))
    assert institution.nome == "Nome Antigo"


async def test_courses_without_stored_institution_are_dropped(session_maker, cache, settings) -> None:
    """A course whose institution row failed validation never reaches the table."""
    orphan = "8,,1,1,801,CURSO ORFAO,1,AREA,1,1,1,CIDADE,SP,100"
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv(MEC_ROWS + [orphan])))

    result = await service.sync()

    assert result.children_inserted == 4
    async with session_maker() as session:
        codes = set((await session.execute(select(MecCourse.codigo_curso))).scalars().all())
    assert 801 not in codes


async def test_row_errors_are_reported_and_metadata_is_partial(session_maker, cache, settings) -> None:
    broken = '9,"UNCLOSED,1,1,901,CURSO,1,AREA,1,1,1,CIDADE,SP,100'
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv(MEC_ROWS + [broken])))

    result = await service.sync()

    assert len(result.errors) == 1
    assert result.errors[0].row == 6
    metadata = await service.get_sync_metadata()
    assert metadata.last_sync_status == "partial"
    assert metadata.errors_count == 1
    assert metadata.total_parents == 3
    assert metadata.total_children == 4
    last_log = await service.get_last_sync_log()
    assert last_log.status == SyncStatus.SUCCESS
    assert last_log.errors_count == 1


async def test_successful_sync_writes_metadata_and_releases_lock(session_maker, cache, settings, redis_client) -> None:
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    await service.sync("scheduled")

    metadata = await service.get_sync_metadata()
    assert metadata.last_sync_status == "success"
    assert metadata.triggered_by == "scheduled"
    assert metadata.last_sync_duration_ms >= 0
    assert await redis_client.ttl(MEC_SYNC_METADATA_KEY) > 0
    assert not await service.is_sync_running()


async def test_sync_invalidates_read_side_caches(session_maker, cache, settings, redis_client) -> None:
    await redis_client.set("mec:institutions:list", "[]")
    await redis_client.set("mec:courses:ies:1", "[]")
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    await service.sync()

    assert await redis_client.exists("mec:institutions:list") == 0
    assert await redis_client.exists("mec:courses:ies:1") == 0


async def test_failed_sync_is_recorded_and_reraised(session_maker, cache, settings) -> None:
    """Acquisition failure marks the run failed, writes failed metadata and frees the lock."""
    acquirer = StubAcquirer(error=AcquisitionError("Dataset download failed: timeout. No local cache available."))
    service = _service(session_maker, cache, settings, acquirer)

    with pytest.raises(AcquisitionError):
        await service.sync()

    logs = await _sync_logs(session_maker)
    assert len(logs) == 1
    assert logs[0].status == SyncStatus.FAILED
    assert "No local cache available" in logs[0].error_message
    assert logs[0].error_details["type"] == "AcquisitionError"
    assert logs[0].completed_at is not None
    assert (await service.get_sync_metadata()).last_sync_status == "failed"
    assert not await service.is_sync_running()
    assert await _count(session_maker, MecInstitution.id) == 0


async def test_sync_refuses_to_start_while_lock_is_held(session_maker, cache, settings, redis_client) -> None:
    """A held lock fails fast without creating a run record or touching the source."""
    await redis_client.set(MEC_SYNC_LOCK_KEY, "another-instance", ex=60)
    acquirer = StubAcquirer(build_mec_csv())
    service = _service(session_maker, cache, settings, acquirer)

    with pytest.raises(SyncInProgressError):
        await service.sync()

    assert acquirer.calls == 0
    assert await _sync_logs(session_maker) == []
    assert await redis_client.get(MEC_SYNC_LOCK_KEY) == "another-instance"


async def test_concurrent_syncs_run_one_at_a_time(session_maker, cache, settings) -> None:
    gate = asyncio.Event()
    slow = StubAcquirer(build_mec_csv(), gate=gate)
    first = _service(session_maker, cache, settings, slow)
    second = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    task = asyncio.create_task(first.sync())
    for _ in range(500):
        if slow.calls:
            break
        await asyncio.sleep(0.01)

    assert await second.is_sync_running()
    with pytest.raises(SyncInProgressError):
        await second.sync()

    gate.set()
    result = await task

    assert result.parents_inserted == 3
    assert not await first.is_sync_running()
    assert len(await _sync_logs(session_maker)) == 1


async def test_failure_to_finalize_is_recorded_as_failed(session_maker, cache, settings, monkeypatch) -> None:
    """Metadata never reports success while the run log is still running."""
    service = _service(session_maker, cache, settings, StubAcquirer(build_mec_csv()))

    async def broken_finalize(sync_log_id, outcome):
        raise PersistenceError(f"Could not finalize sync log #{sync_log_id}: database is locked")

    monkeypatch.setattr(service, "_finalize_success", broken_finalize)

    with pytest.raises(PersistenceError):
        await service.sync()

    logs = await _sync_logs(session_maker)
    assert len(logs) == 1
    assert logs[0].status == SyncStatus.FAILED
    assert "database is locked" in logs[0].error_message
    assert (await service.get_sync_metadata()).last_sync_status == "failed"
    assert not await service.is_sync_running()
