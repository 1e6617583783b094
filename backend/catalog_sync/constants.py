"""
Cache keys and TTLs shared by the sync services and the read side.
Prefix keys end with ':' and are completed with a partition value (UF, IES code, query hash).
"""

# ========== MEC dataset ==========
MEC_INSTITUTIONS_LIST_KEY = "mec:institutions:list"
MEC_INSTITUTIONS_BY_UF_PREFIX = "mec:institutions:uf:"
MEC_COURSES_BY_IES_PREFIX = "mec:courses:ies:"
MEC_COURSES_SEARCH_PREFIX = "mec:courses:search:"
MEC_SYNC_LOCK_KEY = "mec:sync:lock"
MEC_SYNC_METADATA_KEY = "mec:sync:metadata"

MEC_INSTITUTIONS_LIST_TTL = 60 * 60 * 24
MEC_INSTITUTIONS_BY_UF_TTL = 60 * 60 * 24
MEC_COURSES_BY_IES_TTL = 60 * 60 * 24
MEC_COURSES_SEARCH_TTL = 60 * 60

# ========== Tech skills catalog ==========
TECH_SKILLS_LIST_KEY = "tech:skills:list"
TECH_SKILLS_PREFIX = "tech:skills:"
TECH_SKILLS_SYNC_LOCK_KEY = "tech:sync:lock"
TECH_SKILLS_SYNC_METADATA_KEY = "tech:sync:metadata"
