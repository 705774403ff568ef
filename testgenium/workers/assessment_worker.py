# testgenium/workers/assessment_worker.py
import asyncio
from typing import Any, Dict

from celery import Task

from testgenium.core.config import Settings, get_settings
from testgenium.core.logging import logger
from testgenium.workers.celery_app import celery_app
from testgenium.workers.dispatcher import AssessmentTicket


class AssessmentTask(Task):
    """Custom task class for assessment tasks"""

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure"""
        logger.error(f"Assessment task {task_id} failed: {exc}", exc_info=True)


@celery_app.task(bind=True, base=AssessmentTask, name="execute_assessment")
def execute_assessment_task(self, ticket: Dict[str, Any]) -> Dict[str, Any]:
    """Run one assessment in a worker process and record its terminal state"""
    assessment = AssessmentTicket.from_dict(ticket)
    logger.info(
        "Assessment picked up by worker",
        extra={"job_id": assessment.job_id, "tenant_id": assessment.tenant_id},
    )
    asyncio.run(_execute_async(assessment))
    return {"job_id": assessment.job_id}


async def _execute_async(ticket: AssessmentTicket) -> None:
    """Async execution logic; the orchestrator owns the terminal write"""
    from testgenium.db.database import close_db, create_db_engine, create_session_factory, init_db
    from testgenium.engines.registry import EngineRegistry, default_engines
    from testgenium.services.orchestrator import JobOrchestrator

    settings = get_settings()
    db_engine = create_db_engine(settings)
    registry = EngineRegistry(default_engines(settings))

    try:
        await init_db(db_engine)
        await registry.initialize()
        orchestrator = JobOrchestrator(
            create_session_factory(db_engine),
            registry.get(settings.ASSESSMENT_ENGINE),
            dispatcher=None,
            settings=settings,
        )
        await orchestrator.execute(ticket)
    except Exception as e:
        logger.error(
            f"Assessment execution failed: {e}",
            exc_info=True,
            extra={"job_id": ticket.job_id, "tenant_id": ticket.tenant_id},
        )
        # Update job status to failed
        await _update_job_failed(settings, ticket, e)
        raise
    finally:
        await registry.cleanup_all()
        await close_db(db_engine)


async def _update_job_failed(settings: Settings, ticket: AssessmentTicket, error: Exception) -> None:
    """Close the job as failed through its own connection"""
    from testgenium.core.errors import EngineFailure
    from testgenium.db.database import close_db, create_db_engine, create_session_factory
    from testgenium.services.orchestrator import JobOrchestrator

    db_engine = create_db_engine(settings)
    try:
        orchestrator = JobOrchestrator(
            create_session_factory(db_engine),
            engine=None,
            dispatcher=None,
            settings=settings,
        )
        await orchestrator.fail_job(ticket.job_id, EngineFailure(f"Worker error: {error}"))
    except Exception as e:
        logger.error(
            f"Failed to update job status: {e}",
            exc_info=True,
            extra={"job_id": ticket.job_id},
        )
    finally:
        await close_db(db_engine)
