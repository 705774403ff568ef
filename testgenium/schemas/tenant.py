# testgenium/schemas/tenant.py
from datetime import datetime
from typing import Optional

from testgenium.db.models.tenant import Tenant as TenantModel
from testgenium.schemas.common import CamelModel


class Usage(CamelModel):
    tests_this_month: int
    total_tests: int
    last_test_date: Optional[datetime] = None


class PlanLimits(CamelModel):
    tests_per_month: int
    max_concurrent_tests: int
    api_access: bool
    custom_reports: bool


class Tenant(CamelModel):
    id: str
    email: str
    company_name: str
    full_name: str
    phone: Optional[str] = None
    plan: str
    usage: Usage
    plan_limits: PlanLimits
    is_verified: bool
    created_at: datetime

    @classmethod
    def from_model(cls, tenant: TenantModel) -> "Tenant":
        return cls(
            id=tenant.id,
            email=tenant.email,
            company_name=tenant.company_name,
            full_name=tenant.full_name,
            phone=tenant.phone,
            plan=tenant.plan,
            usage=Usage(
                tests_this_month=tenant.tests_this_month,
                total_tests=tenant.total_tests,
                last_test_date=tenant.last_test_at,
            ),
            plan_limits=PlanLimits(
                tests_per_month=tenant.tests_per_month,
                max_concurrent_tests=tenant.max_concurrent_tests,
                api_access=tenant.api_access,
                custom_reports=tenant.custom_reports,
            ),
            is_verified=tenant.is_verified,
            created_at=tenant.created_at,
        )


class JobStats(CamelModel):
    total_jobs: int
    completed_jobs: int
    running_jobs: int
    failed_jobs: int
    total_findings: int


class Profile(CamelModel):
    tenant: Tenant
    stats: JobStats
