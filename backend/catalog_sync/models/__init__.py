from .mec import MecInstitution, MecCourse
from .sync_log import SyncLog, SyncStatus, SyncSource
from .tech_skill import TechSkill

__all__ = [
    # MEC dataset
    "MecInstitution", "MecCourse",
    # Sync audit history
    "SyncLog", "SyncStatus", "SyncSource",
    # Tech skills catalog
    "TechSkill",
]
