from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from ..database import Base


class TechSkill(Base):
    __tablename__ = "tech_skills"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    name_en = Column(String(255), nullable=False)
    name_pt_br = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default="OTHER")
    niche_slug = Column(String(100), nullable=True)
    color = Column(String(20), nullable=True)
    aliases = Column(JSON, default=list)
    keywords = Column(JSON, default=list)
    popularity = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
