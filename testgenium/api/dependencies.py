# testgenium/api/dependencies.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.config import Settings
from testgenium.db.database import get_db
from testgenium.db.models.tenant import Tenant
from testgenium.services.credentials import CredentialService
from testgenium.services.orchestrator import JobOrchestrator

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> JobOrchestrator:
    return request.app.state.orchestrator


def get_credential_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CredentialService:
    return CredentialService(db, settings)


async def get_current_tenant(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    credential_service: CredentialService = Depends(get_credential_service),
) -> Tenant:
    """Get the tenant behind the bearer token; raises TokenMissing/Invalid/Expired"""
    token = credentials.credentials if credentials else None
    tenant = await credential_service.verify_token(token)
    request.state.tenant_id = tenant.id
    return tenant
