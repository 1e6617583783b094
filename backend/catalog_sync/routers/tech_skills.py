"""
Tech skills API endpoints - internal sync control for the Stack Overflow catalog
"""
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_tech_skills_sync_service
from ..schemas.sync import SyncTriggerResponse, SyncStatusResponse, SyncHistoryResponse
from ..services.internal_auth import verify_internal_token
from ..services.tech_skills_sync import TechSkillsSyncService
from .sync_helpers import trigger_sync, sync_status, sync_history

router = APIRouter(
    prefix="/api/tech-skills",
    tags=["Tech Skills"],
    dependencies=[Depends(verify_internal_token)],
)


@router.post("/internal/sync", response_model=SyncTriggerResponse)
async def trigger_tech_skills_sync(
    service: TechSkillsSyncService = Depends(get_tech_skills_sync_service),
):
    return await trigger_sync(service)


@router.get("/internal/sync/status", response_model=SyncStatusResponse)
async def get_tech_skills_sync_status(
    service: TechSkillsSyncService = Depends(get_tech_skills_sync_service),
):
    return await sync_status(service)


@router.get("/internal/sync/history", response_model=SyncHistoryResponse)
async def get_tech_skills_sync_history(
    limit: int = Query(10, ge=1, le=100),
    service: TechSkillsSyncService = Depends(get_tech_skills_sync_service),
):
    return await sync_history(service, limit)
