"""
Shared handlers behind the internal /sync endpoints of each dataset router.
"""
import logging

from fastapi import HTTPException, status

from ..exceptions import SyncInProgressError
from ..schemas.sync import (
    SyncTriggerData,
    SyncTriggerResponse,
    SyncStatusResponse,
    SyncHistoryResponse,
    SyncLogResponse,
)
from ..services.sync_base import BaseSyncService

logger = logging.getLogger(__name__)


async def trigger_sync(service: BaseSyncService, triggered_by: str = "api") -> SyncTriggerResponse:
    try:
        result = await service.sync(triggered_by)
    except SyncInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        # Traceback already logged by the sync service
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Sync failed",
        )

    return SyncTriggerResponse(
        data=SyncTriggerData(
            parents_inserted=result.parents_inserted,
            children_inserted=result.children_inserted,
            total_rows_processed=result.total_rows_processed,
            errors_count=len(result.errors),
        )
    )


async def sync_status(service: BaseSyncService) -> SyncStatusResponse:
    is_running = await service.is_sync_running()
    metadata = await service.get_sync_metadata()
    last_log = await service.get_last_sync_log()
    return SyncStatusResponse(
        is_running=is_running,
        metadata=metadata,
        last_sync=SyncLogResponse.model_validate(last_log) if last_log else None,
    )


async def sync_history(service: BaseSyncService, limit: int) -> SyncHistoryResponse:
    history = await service.get_sync_history(limit)
    return SyncHistoryResponse(history=[SyncLogResponse.model_validate(log) for log in history])
