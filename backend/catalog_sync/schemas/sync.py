from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from ..models.sync_log import SyncStatus, SyncSource


class SyncError(BaseModel):
    """A row that could not be processed. `row` is the 1-based line number in the source."""
    row: int
    message: str


class SyncResult(BaseModel):
    sync_log_id: Optional[int] = None
    parents_inserted: int = 0
    children_inserted: int = 0
    total_rows_processed: int = 0
    duration_ms: int = 0
    errors: List[SyncError] = Field(default_factory=list)


class SyncMetadata(BaseModel):
    """Summary of the last run, kept in the shared cache."""
    last_sync_at: datetime
    last_sync_status: str  # success, partial or failed
    last_sync_duration_ms: int
    total_parents: int = 0
    total_children: int = 0
    errors_count: int = 0
    triggered_by: str


class SyncLogResponse(BaseModel):
    id: int
    source: SyncSource
    status: SyncStatus
    triggered_by: str
    parents_inserted: Optional[int] = 0
    children_inserted: Optional[int] = 0
    total_rows_processed: Optional[int] = 0
    errors_count: Optional[int] = 0
    source_file_size: Optional[int] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SyncTriggerData(BaseModel):
    parents_inserted: int
    children_inserted: int
    total_rows_processed: int
    errors_count: int


class SyncTriggerResponse(BaseModel):
    success: bool = True
    message: str = "Sync completed successfully"
    data: SyncTriggerData


class SyncStatusResponse(BaseModel):
    is_running: bool
    metadata: Optional[SyncMetadata] = None
    last_sync: Optional[SyncLogResponse] = None


class SyncHistoryResponse(BaseModel):
    history: List[SyncLogResponse]
