from pydantic import BaseModel, Field
from typing import List, Optional


class StackOverflowTag(BaseModel):
    name: str
    count: int = 0


class ParsedSkill(BaseModel):
    slug: str
    name_en: str
    name_pt_br: str
    type: str = "OTHER"
    niche_slug: Optional[str] = None
    color: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    popularity: int = 0
