# testgenium/db/database.py
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from testgenium.core.config import Settings


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for DATABASE_URL"""
    url = settings.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")
    kwargs = {"echo": settings.DB_ECHO}
    if url.startswith("sqlite"):
        # Writers queue on the database lock instead of failing fast
        kwargs["connect_args"] = {"timeout": 30}
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database (create tables)"""
    from testgenium.db.base import Base

    async with engine.begin() as conn:
        # Import all models to ensure they're registered
        from testgenium.db.models import tenant, job  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections"""
    await engine.dispose()
