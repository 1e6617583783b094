"""
Sync Log Model - Append-only audit history of dataset synchronization runs.
"""
from enum import Enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Enum as SQLEnum
from ..database import Base


class SyncStatus(str, Enum):
    """Status of a sync run."""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class SyncSource(str, Enum):
    """Dataset a sync run pulls from."""
    MEC = "mec"
    TECH_SKILLS = "tech_skills"


class SyncLog(Base):
    """
    One row per sync run. Created as RUNNING before any work starts and
    finalized as SUCCESS or FAILED when the run ends.
    """
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(SQLEnum(SyncSource), nullable=False, index=True)
    status = Column(SQLEnum(SyncStatus), default=SyncStatus.RUNNING, nullable=False)
    triggered_by = Column(String(50), nullable=False, default="manual")

    # Counts
    parents_inserted = Column(Integer, default=0)
    children_inserted = Column(Integer, default=0)
    total_rows_processed = Column(Integer, default=0)
    errors_count = Column(Integer, default=0)
    source_file_size = Column(Integer, nullable=True)

    # Failure details
    error_message = Column(Text, nullable=True)
    error_details = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
