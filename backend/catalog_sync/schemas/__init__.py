from .mec import (
    MecCsvRow, NormalizedInstitution, NormalizedCourse,
    InstitutionResponse, CourseResponse, CourseInstitutionSummary, MecStats
)
from .sync import (
    SyncError, SyncResult, SyncMetadata, SyncLogResponse,
    SyncTriggerData, SyncTriggerResponse, SyncStatusResponse, SyncHistoryResponse
)
from .tech_skill import StackOverflowTag, ParsedSkill

__all__ = [
    # MEC
    "MecCsvRow", "NormalizedInstitution", "NormalizedCourse",
    "InstitutionResponse", "CourseResponse", "CourseInstitutionSummary", "MecStats",
    # Sync runs
    "SyncError", "SyncResult", "SyncMetadata", "SyncLogResponse",
    "SyncTriggerData", "SyncTriggerResponse", "SyncStatusResponse", "SyncHistoryResponse",
    # Tech skills
    "StackOverflowTag", "ParsedSkill",
]
