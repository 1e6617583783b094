"""
MEC Query Service - cached reads over the synced institutions and courses.

Fills the same cache keys the MEC sync invalidates.
"""
import hashlib
import logging
from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from ..constants import (
    MEC_INSTITUTIONS_LIST_KEY,
    MEC_INSTITUTIONS_LIST_TTL,
    MEC_INSTITUTIONS_BY_UF_PREFIX,
    MEC_INSTITUTIONS_BY_UF_TTL,
    MEC_COURSES_BY_IES_PREFIX,
    MEC_COURSES_BY_IES_TTL,
    MEC_COURSES_SEARCH_PREFIX,
    MEC_COURSES_SEARCH_TTL,
)
from ..models.mec import MecInstitution, MecCourse
from ..schemas.mec import InstitutionResponse, CourseResponse, CourseInstitutionSummary, MecStats
from .cache import CacheService

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def search_cache_key(query: str, limit: int) -> str:
    digest = hashlib.md5(f"{query}:{limit}".encode("utf-8")).hexdigest()[:8]
    return f"{MEC_COURSES_SEARCH_PREFIX}{digest}"


def _course_response(course: MecCourse) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        codigo_curso=course.codigo_curso,
        nome=course.nome,
        grau=course.grau,
        modalidade=course.modalidade,
        area_conhecimento=course.area_conhecimento,
        institution=CourseInstitutionSummary(
            nome=course.institution.nome,
            sigla=course.institution.sigla,
            uf=course.institution.uf,
        ),
    )


class MecQueryService:
    def __init__(self, db: AsyncSession, cache: CacheService):
        self.db = db
        self.cache = cache

    async def get_all_institutions(self) -> List[InstitutionResponse]:
        cached = await self.cache.get(MEC_INSTITUTIONS_LIST_KEY)
        if cached is not None:
            return [InstitutionResponse(**item) for item in cached]

        result = await self.db.execute(
            select(MecInstitution)
            .where(MecInstitution.is_active == True)
            .order_by(MecInstitution.uf, MecInstitution.nome)
        )
        institutions = [InstitutionResponse.model_validate(i) for i in result.scalars().all()]

        await self.cache.set(
            MEC_INSTITUTIONS_LIST_KEY,
            [i.model_dump() for i in institutions],
            MEC_INSTITUTIONS_LIST_TTL,
        )
        return institutions

    async def get_institutions_by_uf(self, uf: str) -> List[InstitutionResponse]:
        normalized_uf = uf.strip().upper()
        cache_key = f"{MEC_INSTITUTIONS_BY_UF_PREFIX}{normalized_uf}"

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return [InstitutionResponse(**item) for item in cached]

        result = await self.db.execute(
            select(MecInstitution)
            .where(MecInstitution.uf == normalized_uf, MecInstitution.is_active == True)
            .order_by(MecInstitution.nome)
        )
        institutions = [InstitutionResponse.model_validate(i) for i in result.scalars().all()]

        await self.cache.set(cache_key, [i.model_dump() for i in institutions], MEC_INSTITUTIONS_BY_UF_TTL)
        return institutions

    async def get_courses_by_institution(self, codigo_ies: int) -> List[CourseResponse]:
        cache_key = f"{MEC_COURSES_BY_IES_PREFIX}{codigo_ies}"

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return [CourseResponse(**item) for item in cached]

        result = await self.db.execute(
            select(MecCourse)
            .options(joinedload(MecCourse.institution))
            .where(MecCourse.codigo_ies == codigo_ies, MecCourse.is_active == True)
            .order_by(MecCourse.nome)
        )
        courses = [_course_response(c) for c in result.scalars().all()]

        await self.cache.set(cache_key, [c.model_dump() for c in courses], MEC_COURSES_BY_IES_TTL)
        return courses

    async def search_courses(self, query: str, limit: int = 20) -> List[CourseResponse]:
        """Case-insensitive substring search on course name. Queries under 2 characters return nothing."""
        normalized_query = query.lower().strip()
        if len(normalized_query) < MIN_SEARCH_LENGTH:
            return []

        cache_key = search_cache_key(normalized_query, limit)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return [CourseResponse(**item) for item in cached]

        result = await self.db.execute(
            select(MecCourse)
            .options(joinedload(MecCourse.institution))
            .where(
                MecCourse.is_active == True,
                func.lower(MecCourse.nome).contains(normalized_query, autoescape=True),
            )
            .order_by(MecCourse.nome)
            .limit(limit)
        )
        courses = [_course_response(c) for c in result.scalars().all()]

        await self.cache.set(cache_key, [c.model_dump() for c in courses], MEC_COURSES_SEARCH_TTL)
        return courses

    async def get_stats(self) -> MecStats:
        total_institutions = await self.db.scalar(
            select(func.count(MecInstitution.id)).where(MecInstitution.is_active == True)
        )
        total_courses = await self.db.scalar(
            select(func.count(MecCourse.id)).where(MecCourse.is_active == True)
        )
        by_uf = await self.db.execute(
            select(MecInstitution.uf, func.count(MecInstitution.id))
            .where(MecInstitution.is_active == True)
            .group_by(MecInstitution.uf)
            .order_by(MecInstitution.uf)
        )
        return MecStats(
            total_institutions=total_institutions or 0,
            total_courses=total_courses or 0,
            institutions_by_uf={uf: count for uf, count in by_uf.all()},
        )
