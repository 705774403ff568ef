# testgenium/services/orchestrator.py
"""
Job lifecycle: running -> completed | failed.

A job is persisted already ``running`` together with the quota unit it
consumes, then the engine run is dispatched and ``start_job`` returns.
The run ends in exactly one terminal write; the store ignores any later one.

Progress is an elapsed-time estimate against the expected duration for
the job's depth. It stays below 100 until the terminal write.
"""
import asyncio
import math
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import async_sessionmaker

from testgenium.core.config import Settings
from testgenium.core.constants import MAX_TARGET_LENGTH, TERMINAL_STATUSES, JobStatus
from testgenium.core.errors import (
    EngineFailure,
    EngineTimeout,
    InvalidTarget,
    NotFound,
    OrchError,
    TokenInvalid,
)
from testgenium.core.logging import logger
from testgenium.db.base import utcnow
from testgenium.db.models.job import Job
from testgenium.db.repositories.job_repository import JobRepository
from testgenium.db.repositories.tenant_repository import TenantRepository
from testgenium.engines.base import BaseAssessmentEngine, Finding
from testgenium.schemas.job import JobCreate, JobSummary, JobView
from testgenium.services.entitlements import EntitlementLedger
from testgenium.services.scoring import NO_SCORE, empty_result, summarize
from testgenium.workers.dispatcher import AssessmentTicket, JobDispatcher


def new_job_id() -> str:
    return f"job_{uuid.uuid4().hex}"


def validate_target(target: Optional[str]) -> str:
    """Return the stripped target URL or raise InvalidTarget"""
    if not target or not target.strip():
        raise InvalidTarget("Target URL is required")

    target = target.strip()
    if len(target) > MAX_TARGET_LENGTH:
        raise InvalidTarget("Target URL is too long")

    parsed = urlparse(target)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidTarget(f"Target must be an absolute http(s) URL, got {target!r}")
    return target


class JobOrchestrator:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        engine: BaseAssessmentEngine,
        dispatcher: Optional[JobDispatcher],
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.engine = engine
        self.dispatcher = dispatcher
        self.settings = settings
        # Injectable for deterministic progress and timestamp tests
        self.clock = clock

    # ------------------------------------------------------------------ start

    async def start_job(self, tenant_id: str, request: JobCreate) -> Job:
        """Validate, reserve quota, persist the running job and dispatch the run"""
        target = validate_target(request.target)
        profile = request.profile.value
        depth = request.depth.value

        async with self.session_factory() as session:
            tenants = TenantRepository(session)
            ledger = EntitlementLedger(session)

            tenant = await tenants.get_active(tenant_id)
            if tenant is None:
                raise TokenInvalid()

            if not await ledger.can_start(tenant):
                logger.info("Job refused: quota", extra={"tenant_id": tenant_id})
                raise await ledger.quota_exceeded(tenant)

            now = self.clock()
            if not await ledger.record_start(tenant_id, now):
                # Another start consumed the last unit between the read and the write
                await session.rollback()
                await session.refresh(tenant)
                logger.info("Job refused: quota taken concurrently", extra={"tenant_id": tenant_id})
                raise await ledger.quota_exceeded(tenant)

            job = await JobRepository(session).create({
                "id": new_job_id(),
                "owner_id": tenant_id,
                "target": target,
                "profile": profile,
                "depth": depth,
                "headers": request.headers or {},
                "status": JobStatus.RUNNING.value,
                "progress": 0,
                "created_at": now,
                "started_at": now,
            }, commit=False)
            await session.commit()

        ticket = AssessmentTicket(
            job_id=job.id,
            tenant_id=tenant_id,
            target=target,
            profile=profile,
            depth=depth,
            headers=dict(request.headers or {}),
        )
        try:
            await self.dispatcher.submit(ticket, self.execute)
        except Exception as e:
            logger.exception("Could not dispatch job", extra={"job_id": job.id, "tenant_id": tenant_id})
            await self.fail_job(job.id, EngineFailure(f"Dispatch failed: {e}"))
            async with self.session_factory() as session:
                return await JobRepository(session).get(job.id)

        logger.info(
            f"Job started for {target}",
            extra={"tenant_id": tenant_id, "job_id": job.id},
        )
        return job

    # ---------------------------------------------------------------- execute

    async def execute(self, ticket: AssessmentTicket) -> None:
        """Run the engine once and commit the terminal state; never raises for engine errors"""
        try:
            findings = await self._run_engine(ticket)
        except OrchError as e:
            await self.fail_job(ticket.job_id, e)
            return

        try:
            await self.complete_job(ticket.job_id, findings)
        except Exception as e:
            logger.exception("Could not store job result", extra={"job_id": ticket.job_id})
            await self.fail_job(ticket.job_id, EngineFailure(f"Result could not be stored: {e}"))

    async def _run_engine(self, ticket: AssessmentTicket) -> List[Finding]:
        timeout = self.settings.ENGINE_TIMEOUT_SECONDS
        try:
            raw = await asyncio.wait_for(
                self.engine.run(ticket.target, ticket.profile, ticket.depth, ticket.headers),
                timeout=timeout,
            )
            return [f if isinstance(f, Finding) else Finding.from_dict(f) for f in raw]
        except asyncio.TimeoutError:
            logger.warning(
                f"Engine {self.engine.name} timed out after {timeout}s",
                extra={"job_id": ticket.job_id, "tenant_id": ticket.tenant_id},
            )
            raise EngineTimeout(f"Assessment did not finish within {timeout:g}s")
        except Exception as e:
            logger.error(
                f"Engine {self.engine.name} failed: {e}",
                exc_info=True,
                extra={"job_id": ticket.job_id, "tenant_id": ticket.tenant_id},
            )
            raise EngineFailure(str(e) or e.__class__.__name__)

    async def complete_job(self, job_id: str, findings: List[Finding]) -> bool:
        """Store findings and summary; False if the job was already terminal"""
        async with self.session_factory() as session:
            jobs = JobRepository(session)
            job = await jobs.get(job_id)
            if job is None:
                raise NotFound()

            completed_at = self.clock()
            applied = await jobs.update_terminal(job_id, {
                "status": JobStatus.COMPLETED.value,
                "progress": 100,
                "completed_at": completed_at,
                "duration_seconds": self._duration(job.started_at, completed_at),
                "result": summarize(findings, job.profile, job.depth),
                "findings": [f.to_dict() for f in findings],
                "findings_count": len(findings),
            })

        if applied:
            logger.info(
                f"Job completed with {len(findings)} findings",
                extra={"job_id": job_id, "tenant_id": job.owner_id},
            )
        return applied

    async def fail_job(self, job_id: str, error: OrchError) -> bool:
        """Close the job as failed with an empty result; False if already terminal"""
        async with self.session_factory() as session:
            jobs = JobRepository(session)
            job = await jobs.get(job_id)
            if job is None:
                raise NotFound()

            completed_at = self.clock()
            applied = await jobs.update_terminal(job_id, {
                "status": JobStatus.FAILED.value,
                "progress": 100,
                "completed_at": completed_at,
                "duration_seconds": self._duration(job.started_at, completed_at),
                "result": empty_result(),
                "findings": [],
                "findings_count": 0,
                "error_message": f"{error.kind}: {error.message}",
            })

        if applied:
            logger.warning(
                f"Job failed: {error.kind}",
                extra={"job_id": job_id, "tenant_id": job.owner_id},
            )
        return applied

    async def recover_orphaned_jobs(self) -> int:
        """Fail running jobs whose run cannot still be alive, e.g. after a restart"""
        now = self.clock()
        cutoff = now - timedelta(seconds=self.settings.ENGINE_TIMEOUT_SECONDS)
        async with self.session_factory() as session:
            count = await JobRepository(session).fail_stale_running(cutoff, {
                "status": JobStatus.FAILED.value,
                "progress": 100,
                "completed_at": now,
                "result": empty_result(),
                "findings": [],
                "findings_count": 0,
                "error_message": f"{EngineTimeout.kind}: run was lost before completion",
            })
        if count:
            logger.warning(f"Closed {count} orphaned running jobs as failed")
        return count

    # ------------------------------------------------------------------- read

    async def get_status(self, tenant_id: str, job_id: str) -> JobView:
        async with self.session_factory() as session:
            job = await JobRepository(session).get_for_owner(job_id, tenant_id)
        if job is None:
            raise NotFound()
        return self.to_view(job)

    async def list_jobs(self, tenant_id: str, limit: int, offset: int) -> Tuple[List[JobSummary], int]:
        async with self.session_factory() as session:
            jobs = JobRepository(session)
            items = await jobs.list_by_owner(tenant_id, limit=limit, offset=offset)
            total = await jobs.count_by_owner(tenant_id)
        return [self.to_summary(job) for job in items], total

    def progress_of(self, job: Job) -> int:
        if job.status in {s.value for s in TERMINAL_STATUSES}:
            return 100
        if job.status != JobStatus.RUNNING.value or job.started_at is None:
            return 0

        expected = self.settings.EXPECTED_DURATION_SECONDS.get(job.depth) or 60.0
        elapsed = max((self.clock() - job.started_at).total_seconds(), 0.0)
        return min(99, math.floor(elapsed / expected * 100))

    def to_view(self, job: Job) -> JobView:
        data = {
            "job_id": job.id,
            "status": job.status,
            "progress": self.progress_of(job),
            "target": job.target,
            "profile": job.profile,
            "depth": job.depth,
            "created_at": job.created_at,
            "started_at": job.started_at,
        }
        # Result and findings exist only once the job is terminal
        if job.status in {s.value for s in TERMINAL_STATUSES}:
            data.update({
                "completed_at": job.completed_at,
                "duration": job.duration_seconds,
                "result": job.result,
                "findings": job.findings or [],
                "error": job.error_message,
            })
        return JobView.model_validate(data)

    @staticmethod
    def to_summary(job: Job) -> JobSummary:
        result = job.result or {}
        return JobSummary(
            job_id=job.id,
            target=job.target,
            profile=job.profile,
            depth=job.depth,
            status=job.status,
            created_at=job.created_at,
            completed_at=job.completed_at,
            vulnerabilities=result.get("vulnerabilities", 0),
            score=result.get("score") or NO_SCORE,
        )

    @staticmethod
    def _duration(started_at: Optional[datetime], completed_at: datetime) -> int:
        if started_at is None:
            return 0
        return max(int((completed_at - started_at).total_seconds()), 0)
