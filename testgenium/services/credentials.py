# testgenium/services/credentials.py
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.config import Settings
from testgenium.core.constants import PLAN_LIMITS, PlanType
from testgenium.core.errors import (
    EmailTaken,
    InvalidCredentials,
    StoreConflict,
    TokenInvalid,
    ValidationError,
)
from testgenium.core.logging import logger
from testgenium.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from testgenium.db.models.tenant import Tenant
from testgenium.db.repositories.tenant_repository import TenantRepository
from testgenium.schemas.auth import RegisterRequest


class CredentialService:
    """Validates identities and issues/verifies stateless bearer tokens"""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.tenants = TenantRepository(session)

    def issue_token(self, tenant: Tenant) -> str:
        return create_access_token(tenant.id, self.settings, email=tenant.email)

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> Tuple[Tenant, str]:
        """Check email and secret; returns the tenant and a fresh token"""
        if not email or not password:
            raise InvalidCredentials()

        tenant = await self.tenants.get_by_email(email)
        password_ok = verify_password(password, tenant.hashed_password if tenant else None)

        if not tenant or not password_ok or not tenant.is_active:
            logger.info("Login rejected", extra={"tenant_id": tenant.id if tenant else None})
            raise InvalidCredentials()

        logger.info("Login succeeded", extra={"tenant_id": tenant.id})
        return tenant, self.issue_token(tenant)

    async def verify_token(self, token: Optional[str]) -> Tenant:
        """Resolve a bearer token to its active tenant"""
        payload = decode_token(token, self.settings)

        tenant = await self.tenants.get_active(payload["sub"])
        if tenant is None:
            raise TokenInvalid()
        return tenant

    async def register(self, data: RegisterRequest) -> Tuple[Tenant, str]:
        """Create a tenant with default limits for its plan and zeroed usage"""
        fields = (data.email, data.password, data.company_name, data.full_name)
        if any(not value or not value.strip() for value in fields):
            raise ValidationError()

        if await self.tenants.get_by_email(data.email):
            raise EmailTaken()

        plan = PlanType(data.plan)
        limits = PLAN_LIMITS[plan]
        try:
            tenant = await self.tenants.create({
                "email": data.email,
                "hashed_password": get_password_hash(data.password),
                "company_name": data.company_name.strip(),
                "full_name": data.full_name.strip(),
                "phone": data.phone,
                "plan": plan.value,
                "tests_this_month": 0,
                "total_tests": 0,
                "tests_per_month": limits["tests_per_month"],
                "max_concurrent_tests": limits["max_concurrent_tests"],
                "api_access": limits["api_access"],
                "custom_reports": limits["custom_reports"],
                "is_active": True,
                "is_verified": False,
            })
        except StoreConflict:
            # Lost a race with a concurrent registration of the same email
            raise EmailTaken()

        logger.info("Tenant registered", extra={"tenant_id": tenant.id})
        return tenant, self.issue_token(tenant)
