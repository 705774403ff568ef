# testgenium/api/v1/jobs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from testgenium.api.dependencies import get_app_settings, get_current_tenant, get_orchestrator
from testgenium.core.config import Settings
from testgenium.db.models.tenant import Tenant
from testgenium.schemas.job import JobCreate, JobHistory, JobStarted, JobView
from testgenium.services.orchestrator import JobOrchestrator

router = APIRouter()


@router.post("", response_model=JobStarted)
async def start_job(
    job_in: JobCreate,
    current_tenant: Tenant = Depends(get_current_tenant),
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
):
    """Start an assessment; returns as soon as the job is running"""
    job = await orchestrator.start_job(current_tenant.id, job_in)
    return JobStarted(job_id=job.id, status=job.status)


@router.get("", response_model=JobHistory)
async def list_jobs(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    current_tenant: Tenant = Depends(get_current_tenant),
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_app_settings),
):
    """Job history for the current tenant, newest first"""
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    jobs, total = await orchestrator.list_jobs(current_tenant.id, limit=limit, offset=offset)
    return JobHistory(jobs=jobs, total=total, limit=limit, offset=offset)


@router.get("/{job_id}", response_model=JobView, response_model_exclude_none=True)
async def get_job(
    job_id: str,
    current_tenant: Tenant = Depends(get_current_tenant),
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
):
    """Current status; result and findings only once the job is terminal"""
    return await orchestrator.get_status(current_tenant.id, job_id)
