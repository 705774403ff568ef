# testgenium/services/entitlements.py
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.errors import QuotaExceeded
from testgenium.db.models.tenant import Tenant
from testgenium.db.repositories.job_repository import JobRepository
from testgenium.db.repositories.tenant_repository import TenantRepository


class EntitlementLedger:
    """
    Per-tenant usage against plan limits.

    ``can_start`` is an advisory read. ``record_start`` is the authoritative
    check-and-increment: it only consumes quota when the monthly limit and
    the concurrency limit still hold at write time. Monthly rollover is done
    by an external scheduled reset, not here.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.tenants = TenantRepository(session)
        self.jobs = JobRepository(session)

    async def can_start(self, tenant: Tenant) -> bool:
        within_month = tenant.has_unlimited_tests or tenant.tests_this_month < tenant.tests_per_month
        if not within_month:
            return False
        running = await self.jobs.count_running(tenant.id)
        return running < tenant.max_concurrent_tests

    async def record_start(self, tenant_id: str, now: datetime) -> bool:
        """Consume one test; False when a limit no longer allows it. Does not commit."""
        return await self.tenants.increment_usage_if_allowed(tenant_id, now)

    async def quota_exceeded(self, tenant: Tenant) -> QuotaExceeded:
        """Build the refusal with current usage and limits for the caller to render"""
        running = await self.jobs.count_running(tenant.id)
        if running >= tenant.max_concurrent_tests and (
            tenant.has_unlimited_tests or tenant.tests_this_month < tenant.tests_per_month
        ):
            message = "Concurrent test limit reached"
        else:
            message = "Monthly test limit reached"

        usage = tenant.usage()
        usage["runningTests"] = running
        return QuotaExceeded(message, details={"usage": usage, "limits": tenant.limits()})
