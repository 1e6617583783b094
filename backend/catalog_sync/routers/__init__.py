from .mec import router as mec_router
from .tech_skills import router as tech_skills_router

__all__ = ["mec_router", "tech_skills_router"]
