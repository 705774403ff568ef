# testgenium/api/v1/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.api.dependencies import get_current_tenant
from testgenium.db.database import get_db
from testgenium.db.models.tenant import Tenant as TenantModel
from testgenium.db.repositories.job_repository import JobRepository
from testgenium.schemas.tenant import JobStats, Profile, Tenant

router = APIRouter()


@router.get("/me", response_model=Profile)
async def get_profile(
    current_tenant: TenantModel = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Tenant profile with plan limits, usage and job statistics"""
    stats = await JobRepository(db).stats_for_owner(current_tenant.id)
    return Profile(
        tenant=Tenant.from_model(current_tenant),
        stats=JobStats.model_validate(stats),
    )
