# scripts/seed_data.py
"""Seed database with the demo tenants"""
import asyncio
from datetime import timedelta

from testgenium.core.config import get_settings
from testgenium.core.constants import PLAN_LIMITS, UNLIMITED, PlanType
from testgenium.core.security import get_password_hash
from testgenium.db.base import utcnow
from testgenium.db.database import close_db, create_db_engine, create_session_factory, init_db
from testgenium.db.repositories.tenant_repository import TenantRepository

DEMO_TENANTS = [
    {
        "email": "admin@testgenium.com",
        "password": "admin123",
        "company_name": "TestGenium",
        "full_name": "Administrador",
        "plan": PlanType.ENTERPRISE,
        "tests_this_month": 0,
        "total_tests": 0,
        "is_verified": True,
    },
    {
        "email": "demo@empresa.com",
        "password": "demo123",
        "company_name": "Empresa Demo",
        "full_name": "Usuario Demo",
        "plan": PlanType.PROFESSIONAL,
        "tests_this_month": 15,
        "total_tests": 45,
        "is_verified": True,
    },
]


def tenant_values(demo: dict) -> dict:
    limits = PLAN_LIMITS[demo["plan"]]
    values = {
        "email": demo["email"],
        "hashed_password": get_password_hash(demo["password"]),
        "company_name": demo["company_name"],
        "full_name": demo["full_name"],
        "plan": demo["plan"].value,
        "tests_this_month": demo["tests_this_month"],
        "total_tests": demo["total_tests"],
        "tests_per_month": limits["tests_per_month"],
        "max_concurrent_tests": limits["max_concurrent_tests"],
        "api_access": limits["api_access"],
        "custom_reports": limits["custom_reports"],
        "is_active": True,
        "is_verified": demo["is_verified"],
    }
    if demo["total_tests"]:
        values["last_test_at"] = utcnow() - timedelta(days=1)
    return values


async def seed_data(settings=None) -> list:
    """Create the demo tenants, skipping emails that already exist"""
    settings = settings or get_settings()
    engine = create_db_engine(settings)
    created = []
    try:
        await init_db(engine)
        async with create_session_factory(engine)() as session:
            tenant_repo = TenantRepository(session)

            for demo in DEMO_TENANTS:
                if await tenant_repo.get_by_email(demo["email"]):
                    print(f"Tenant already exists: {demo['email']}")
                    continue

                tenant = await tenant_repo.create(tenant_values(demo))
                created.append(tenant.email)
                monthly = "unlimited" if tenant.tests_per_month == UNLIMITED else tenant.tests_per_month
                print(f"Created tenant: {tenant.email} ({tenant.plan}, {monthly} tests/month)")
    finally:
        await close_db(engine)

    print("\nLogin credentials:")
    for demo in DEMO_TENANTS:
        print(f"{demo['email']} / {demo['password']}")
    return created


if __name__ == "__main__":
    asyncio.run(seed_data())
