# testgenium/workers/dispatcher.py
import asyncio
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from testgenium.core.config import Settings
from testgenium.core.logging import logger


@dataclass(frozen=True)
class AssessmentTicket:
    """Everything an engine run needs, detached from any DB session"""
    job_id: str
    tenant_id: str
    target: str
    profile: str
    depth: str
    headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentTicket":
        return cls(**data)


Runner = Callable[[AssessmentTicket], Awaitable[None]]


class JobDispatcher:
    """Runs each assessment as its own task on the current event loop"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    async def submit(self, ticket: AssessmentTicket, runner: Runner) -> Optional[asyncio.Task]:
        task = asyncio.get_running_loop().create_task(
            runner(ticket), name=f"assessment:{ticket.job_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for submitted runs to finish"""
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)

    async def shutdown(self) -> None:
        """Cancel runs still in flight"""
        tasks = set(self._tasks)
        if tasks:
            logger.warning(f"Cancelling {len(tasks)} in-flight assessments")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class CeleryJobDispatcher(JobDispatcher):
    """Hands each assessment to a Celery worker"""

    async def submit(self, ticket: AssessmentTicket, runner: Runner) -> Optional[asyncio.Task]:
        from testgenium.workers.assessment_worker import execute_assessment_task

        # Publishing to the broker blocks
        await asyncio.to_thread(execute_assessment_task.delay, ticket.to_dict())
        return None


def build_dispatcher(settings: Settings) -> JobDispatcher:
    if settings.JOB_DISPATCH_BACKEND == "celery":
        return CeleryJobDispatcher()
    if settings.JOB_DISPATCH_BACKEND == "inline":
        return JobDispatcher()
    raise ValueError(f"Unknown JOB_DISPATCH_BACKEND {settings.JOB_DISPATCH_BACKEND!r}")
