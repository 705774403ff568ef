# testgenium/db/repositories/job_repository.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.constants import JobStatus
from testgenium.core.errors import StoreConflict
from testgenium.db.models.job import Job
from testgenium.db.repositories.base import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for Job operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Job, session)

    async def create(self, obj_in: dict, commit: bool = True) -> Job:
        """Create a job; a duplicate id is a programming error, never retried"""
        try:
            return await super().create(obj_in, commit=commit)
        except StoreConflict as e:
            raise StoreConflict(f"DuplicateId: job {obj_in.get('id')} already exists") from e

    async def get_for_owner(self, job_id: str, owner_id: str) -> Optional[Job]:
        """
        Get a job only if it belongs to the owner.

        A foreign job and a missing job take the same query and give the
        same None.
        """
        result = await self.session.execute(
            select(Job)
            .where(Job.id == job_id)
            .where(Job.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def update_terminal(self, job_id: str, values: Dict[str, Any]) -> bool:
        """
        Apply the terminal transition in one write.

        Only a running job is updated, so a second call is a no-op.
        Returns True if this call applied the transition.
        """
        result = await self.session.execute(
            update(Job)
            .where(Job.id == job_id)
            .where(Job.status == JobStatus.RUNNING.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def list_by_owner(self, owner_id: str, limit: int, offset: int) -> List[Job]:
        """Jobs of one owner, newest first"""
        result = await self.session.execute(
            select(Job)
            .where(Job.owner_id == owner_id)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_owner(self, owner_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Job.id)).where(Job.owner_id == owner_id)
        )
        return result.scalar() or 0

    async def count_running(self, owner_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Job.id))
            .where(Job.owner_id == owner_id)
            .where(Job.status == JobStatus.RUNNING.value)
        )
        return result.scalar() or 0

    async def stats_for_owner(self, owner_id: str) -> Dict[str, int]:
        """Job counts per status and total findings for an owner"""
        result = await self.session.execute(
            select(Job.status, func.count(Job.id), func.coalesce(func.sum(Job.findings_count), 0))
            .where(Job.owner_id == owner_id)
            .group_by(Job.status)
        )
        by_status = {row[0]: (row[1], row[2]) for row in result.all()}

        def _count(s: JobStatus) -> int:
            return int(by_status.get(s.value, (0, 0))[0])

        return {
            "totalJobs": sum(int(v[0]) for v in by_status.values()),
            "completedJobs": _count(JobStatus.COMPLETED),
            "runningJobs": _count(JobStatus.RUNNING),
            "failedJobs": _count(JobStatus.FAILED),
            "totalFindings": sum(int(v[1]) for v in by_status.values()),
        }

    async def fail_stale_running(self, started_before: datetime, values: Dict[str, Any]) -> int:
        """Close running jobs started before the cutoff; returns how many"""
        result = await self.session.execute(
            update(Job)
            .where(Job.status == JobStatus.RUNNING.value)
            .where(Job.started_at < started_before)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount or 0
