# tests/test_workers.py
"""
Dispatch tests
Tests: In-process dispatcher, Celery hand-off and worker execution
"""

import asyncio
import threading

import pytest

from testgenium.core.constants import ScanDepth
from testgenium.schemas.job import JobCreate
from testgenium.services.orchestrator import JobOrchestrator
from testgenium.workers import assessment_worker
from testgenium.workers.dispatcher import (
    AssessmentTicket,
    CeleryJobDispatcher,
    JobDispatcher,
    build_dispatcher,
)

TICKET = AssessmentTicket(
    job_id="job_1",
    tenant_id="tenant_1",
    target="https://example.com",
    profile="complete",
    depth="standard",
    headers={"Cookie": "a=b"},
)


class TestJobDispatcher:

    @pytest.mark.asyncio
    async def test_submit_and_drain(self):
        dispatcher = JobDispatcher()
        ran = []

        async def runner(ticket):
            await asyncio.sleep(0)
            ran.append(ticket.job_id)

        await dispatcher.submit(TICKET, runner)
        assert dispatcher.in_flight == 1

        await dispatcher.drain()

        assert ran == ["job_1"]
        assert dispatcher.in_flight == 0

    @pytest.mark.asyncio
    async def test_shutdown_cancels_runs(self):
        dispatcher = JobDispatcher()
        gate = asyncio.Event()

        async def runner(ticket):
            await gate.wait()

        task = await dispatcher.submit(TICKET, runner)
        await dispatcher.shutdown()

        assert task.cancelled()

    def test_ticket_round_trips_through_dict(self):
        assert AssessmentTicket.from_dict(TICKET.to_dict()) == TICKET

    def test_build_dispatcher(self, settings):
        assert type(build_dispatcher(settings)) is JobDispatcher
        celery = settings.model_copy(update={"JOB_DISPATCH_BACKEND": "celery"})
        assert isinstance(build_dispatcher(celery), CeleryJobDispatcher)
        with pytest.raises(ValueError):
            build_dispatcher(settings.model_copy(update={"JOB_DISPATCH_BACKEND": "carrier-pigeon"}))


class TestCeleryHandOff:

    @pytest.mark.asyncio
    async def test_start_sends_ticket_to_worker(self, monkeypatch, session_factory, fake_engine, settings, test_tenant):
        sent = []
        monkeypatch.setattr(assessment_worker.execute_assessment_task, "delay", sent.append)
        orchestrator = JobOrchestrator(session_factory, fake_engine, CeleryJobDispatcher(), settings)

        job = await orchestrator.start_job(test_tenant.id, JobCreate(target="https://example.com", depth="deep"))

        assert sent == [{
            "job_id": job.id,
            "tenant_id": test_tenant.id,
            "target": "https://example.com",
            "profile": "complete",
            "depth": ScanDepth.DEEP.value,
            "headers": {},
        }]
        assert fake_engine.calls == []

    @pytest.mark.asyncio
    async def test_publish_runs_off_the_event_loop(self, monkeypatch):
        loop_thread = threading.get_ident()
        publishers = []

        def delay(ticket):
            publishers.append(threading.get_ident())

        monkeypatch.setattr(assessment_worker.execute_assessment_task, "delay", delay)

        assert await CeleryJobDispatcher().submit(TICKET, runner=None) is None

        assert len(publishers) == 1
        assert publishers[0] != loop_thread

    @pytest.mark.asyncio
    async def test_worker_completes_job(self, monkeypatch, session_factory, fake_engine, settings, test_tenant):
        sent = []
        monkeypatch.setattr(assessment_worker.execute_assessment_task, "delay", sent.append)
        worker_settings = settings.model_copy(
            update={"ASSESSMENT_ENGINE": "stub", "STUB_ENGINE_DELAY_SECONDS": 0}
        )
        monkeypatch.setattr(assessment_worker, "get_settings", lambda: worker_settings)
        orchestrator = JobOrchestrator(session_factory, fake_engine, CeleryJobDispatcher(), settings)
        job = await orchestrator.start_job(test_tenant.id, JobCreate(target="https://example.com"))

        await assessment_worker._execute_async(AssessmentTicket.from_dict(sent[0]))

        view = await orchestrator.get_status(test_tenant.id, job.id)
        assert view.status == "completed"
        assert view.findings[0].type == "SQL Injection"
        assert view.findings[0].url == "https://example.com"

    @pytest.mark.asyncio
    async def test_worker_error_fails_job(self, monkeypatch, session_factory, fake_engine, settings, test_tenant):
        sent = []
        monkeypatch.setattr(assessment_worker.execute_assessment_task, "delay", sent.append)
        worker_settings = settings.model_copy(update={"ASSESSMENT_ENGINE": "misconfigured"})
        monkeypatch.setattr(assessment_worker, "get_settings", lambda: worker_settings)
        orchestrator = JobOrchestrator(session_factory, fake_engine, CeleryJobDispatcher(), settings)
        job = await orchestrator.start_job(test_tenant.id, JobCreate(target="https://example.com"))

        with pytest.raises(LookupError):
            await assessment_worker._execute_async(AssessmentTicket.from_dict(sent[0]))

        view = await orchestrator.get_status(test_tenant.id, job.id)
        assert view.status == "failed"
        assert "misconfigured" in view.error

    def test_task_runs_ticket(self, monkeypatch):
        executed = []

        async def fake_execute(ticket):
            executed.append(ticket)

        monkeypatch.setattr(assessment_worker, "_execute_async", fake_execute)

        result = assessment_worker.execute_assessment_task(TICKET.to_dict())

        assert result == {"job_id": "job_1"}
        assert executed == [TICKET]
