# testgenium/db/repositories/tenant_repository.py
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.constants import UNLIMITED, JobStatus
from testgenium.db.models.job import Job
from testgenium.db.models.tenant import Tenant
from testgenium.db.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Tenant, session)

    async def get_by_email(self, email: str) -> Optional[Tenant]:
        """Get tenant by email (exact, case-sensitive match)"""
        result = await self.session.execute(
            select(Tenant).where(Tenant.email == email)
        )
        return result.scalar_one_or_none()

    async def get_active(self, tenant_id: str) -> Optional[Tenant]:
        """Get tenant by ID if the account is still active"""
        result = await self.session.execute(
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .where(Tenant.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def lock_active(self, tenant_id: str) -> Optional[Tenant]:
        """Get the active tenant row and hold its lock until the transaction ends"""
        result = await self.session.execute(
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .where(Tenant.is_active.is_(True))
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def increment_usage_if_allowed(self, tenant_id: str, now: datetime) -> bool:
        """
        Consume one unit of quota.

        The tenant row is locked first, so concurrent starts for one tenant
        queue behind each other. The conditional UPDATE then runs as a new
        statement and counts running jobs committed by the previous holder.
        SQLite has no row locks; there the UPDATE alone is the atomic step.
        Returns True when the row was updated. Does not commit.
        """
        if await self.lock_active(tenant_id) is None:
            return False

        running_jobs = (
            select(func.count(Job.id))
            .where(Job.owner_id == Tenant.id)
            .where(Job.status == JobStatus.RUNNING.value)
            .scalar_subquery()
        )
        result = await self.session.execute(
            update(Tenant)
            .where(Tenant.id == tenant_id)
            .where(Tenant.is_active.is_(True))
            .where(
                or_(
                    Tenant.tests_per_month == UNLIMITED,
                    Tenant.tests_this_month < Tenant.tests_per_month,
                )
            )
            .where(running_jobs < Tenant.max_concurrent_tests)
            .values(
                tests_this_month=Tenant.tests_this_month + 1,
                total_tests=Tenant.total_tests + 1,
                last_test_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
