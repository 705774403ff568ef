"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from testgenium.core.config import Settings
from testgenium.core.constants import PLAN_LIMITS, PlanType, SeverityLevel
from testgenium.core.security import create_access_token, get_password_hash
from testgenium.db.database import close_db, create_db_engine, create_session_factory, init_db
from testgenium.db.repositories.tenant_repository import TenantRepository
from testgenium.engines.base import BaseAssessmentEngine, Finding
from testgenium.main import create_app
from testgenium.services.orchestrator import JobOrchestrator
from testgenium.workers.dispatcher import JobDispatcher

TEST_PASSWORD = "TestPassword123!"


class FakeEngine(BaseAssessmentEngine):
    """Engine with controllable findings, delay, failure and a release gate"""

    name = "fake"
    version = "0.0.1"

    def __init__(self):
        self.findings: List[Finding] = [
            Finding(
                type="SQL Injection",
                severity=SeverityLevel.HIGH,
                payload="' OR '1'='1",
                description="Possible SQL injection vulnerability detected",
                recommendation="Use prepared statements",
                url="https://example.com/login",
            )
        ]
        self.error: Optional[Exception] = None
        self.delay: float = 0.0
        self.release: Optional[asyncio.Event] = None
        self.calls: List[Dict[str, Any]] = []

    async def run(self, target, profile, depth, headers=None):
        self.calls.append({"target": target, "profile": profile, "depth": depth, "headers": headers})
        if self.release is not None:
            await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.findings)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with a per-test SQLite file"""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'testgenium.db'}",
        JWT_SECRET_KEY="test-secret-key",
        ASSESSMENT_ENGINE="fake",
        ENGINE_TIMEOUT_SECONDS=5.0,
        JOB_DISPATCH_BACKEND="inline",
    )


@pytest.fixture
async def db_engine(settings):
    """Create clean database for each test"""
    engine = create_db_engine(settings)
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
async def dispatcher():
    dispatcher = JobDispatcher()
    yield dispatcher
    await dispatcher.shutdown()


@pytest.fixture
def orchestrator(session_factory, fake_engine, dispatcher, settings) -> JobOrchestrator:
    return JobOrchestrator(session_factory, fake_engine, dispatcher, settings)


@pytest.fixture
def make_tenant(session_factory):
    """Factory creating committed tenants with plan defaults"""

    async def _make(
        email: str = "test@example.com",
        plan: PlanType = PlanType.PROFESSIONAL,
        password: str = TEST_PASSWORD,
        **overrides,
    ):
        limits = PLAN_LIMITS[plan]
        values = {
            "email": email,
            "hashed_password": get_password_hash(password),
            "company_name": "Test Company",
            "full_name": "Test User",
            "plan": plan.value,
            "tests_this_month": 0,
            "total_tests": 0,
            "tests_per_month": limits["tests_per_month"],
            "max_concurrent_tests": limits["max_concurrent_tests"],
            "api_access": limits["api_access"],
            "custom_reports": limits["custom_reports"],
            "is_active": True,
            "is_verified": True,
        }
        values.update(overrides)
        async with session_factory() as session:
            return await TenantRepository(session).create(values)

    return _make


@pytest.fixture
async def test_tenant(make_tenant):
    """Create test tenant"""
    return await make_tenant()


@pytest.fixture
def auth_headers(test_tenant, settings) -> dict:
    """Generate auth headers for test tenant"""
    token = create_access_token(test_tenant.id, settings, email=test_tenant.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for(settings):
    def _headers(tenant) -> dict:
        return {"Authorization": f"Bearer {create_access_token(tenant.id, settings)}"}

    return _headers


@pytest.fixture
async def app(settings, fake_engine, db_engine):
    """Application with the fake engine, lifespan started"""
    application = create_app(settings, engines=[fake_engine])
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
