"""
MEC API endpoints - internal sync control and public institution/course lookups
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ..dependencies import get_mec_sync_service, get_mec_query_service
from ..schemas.mec import InstitutionResponse, CourseResponse, MecStats
from ..schemas.sync import SyncTriggerResponse, SyncStatusResponse, SyncHistoryResponse
from ..services.internal_auth import verify_internal_token
from ..services.mec_query import MecQueryService
from ..services.mec_sync import MecSyncService
from .sync_helpers import trigger_sync, sync_status, sync_history

router = APIRouter(prefix="/api/mec", tags=["MEC"])


# ========== Internal (x-internal-token) ==========

@router.post(
    "/internal/sync",
    response_model=SyncTriggerResponse,
    dependencies=[Depends(verify_internal_token)],
)
async def trigger_mec_sync(service: MecSyncService = Depends(get_mec_sync_service)):
    """Run a MEC dataset sync now. 409 if one is already running."""
    return await trigger_sync(service)


@router.get(
    "/internal/sync/status",
    response_model=SyncStatusResponse,
    dependencies=[Depends(verify_internal_token)],
)
async def get_mec_sync_status(service: MecSyncService = Depends(get_mec_sync_service)):
    return await sync_status(service)


@router.get(
    "/internal/sync/history",
    response_model=SyncHistoryResponse,
    dependencies=[Depends(verify_internal_token)],
)
async def get_mec_sync_history(
    limit: int = Query(10, ge=1, le=100),
    service: MecSyncService = Depends(get_mec_sync_service),
):
    return await sync_history(service, limit)


# ========== Public lookups ==========

@router.get("/institutions", response_model=List[InstitutionResponse])
async def list_institutions(
    uf: Optional[str] = Query(None, min_length=2, max_length=2, description="Filter by state (UF)"),
    queries: MecQueryService = Depends(get_mec_query_service),
):
    if uf:
        return await queries.get_institutions_by_uf(uf)
    return await queries.get_all_institutions()


@router.get("/institutions/{codigo_ies}/courses", response_model=List[CourseResponse])
async def list_institution_courses(
    codigo_ies: int,
    queries: MecQueryService = Depends(get_mec_query_service),
):
    return await queries.get_courses_by_institution(codigo_ies)


@router.get("/courses/search", response_model=List[CourseResponse])
async def search_courses(
    q: str = Query(..., description="Course name fragment"),
    limit: int = Query(20, ge=1, le=100),
    queries: MecQueryService = Depends(get_mec_query_service),
):
    """Autocomplete search by course name. Fewer than 2 characters returns an empty list."""
    return await queries.search_courses(q, limit)


@router.get("/stats", response_model=MecStats)
async def get_mec_stats(queries: MecQueryService = Depends(get_mec_query_service)):
    return await queries.get_stats()
