# testgenium/api/v1/auth.py
from fastapi import APIRouter, Depends, status

from testgenium.api.dependencies import get_credential_service
from testgenium.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from testgenium.schemas.tenant import Tenant
from testgenium.services.credentials import CredentialService

router = APIRouter()


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    credential_service: CredentialService = Depends(get_credential_service),
):
    """Exchange email and secret for a bearer token"""
    tenant, token = await credential_service.authenticate(request.email, request.password)
    return AuthResponse(
        message="Login successful",
        tenant=Tenant.from_model(tenant),
        token=token,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    credential_service: CredentialService = Depends(get_credential_service),
):
    """Register a new tenant"""
    tenant, token = await credential_service.register(request)
    return AuthResponse(
        message="Tenant created",
        tenant=Tenant.from_model(tenant),
        token=token,
    )
