# testgenium/main.py
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from testgenium.api.v1.router import api_router
from testgenium.core.config import Settings, get_settings
from testgenium.core.errors import StoreConflict, TestGeniumError
from testgenium.core.logging import logger
from testgenium.db.database import close_db, create_db_engine, create_session_factory, init_db
from testgenium.engines.base import BaseAssessmentEngine
from testgenium.engines.registry import EngineRegistry, default_engines
from testgenium.middleware.security_headers import security_headers_middleware
from testgenium.services.orchestrator import JobOrchestrator
from testgenium.workers.dispatcher import build_dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings: Settings = app.state.settings
    logger.info("Starting TestGenium API", extra={"environment": settings.ENVIRONMENT})
    app.state.started_at = time.monotonic()

    db_engine = create_db_engine(settings)
    await init_db(db_engine)
    app.state.db_engine = db_engine
    app.state.session_factory = create_session_factory(db_engine)

    registry: EngineRegistry = app.state.engine_registry
    await registry.initialize()

    dispatcher = build_dispatcher(settings)
    app.state.dispatcher = dispatcher
    app.state.orchestrator = JobOrchestrator(
        app.state.session_factory,
        registry.get(settings.ASSESSMENT_ENGINE),
        dispatcher,
        settings,
    )
    await app.state.orchestrator.recover_orphaned_jobs()

    yield

    # Shutdown
    logger.info("Shutting down TestGenium API")
    await dispatcher.shutdown()
    await registry.cleanup_all()
    await close_db(db_engine)


def create_app(
    settings: Optional[Settings] = None,
    engines: Optional[Iterable[BaseAssessmentEngine]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logger.setLevel(settings.LOG_LEVEL)

    app = FastAPI(
        title="TestGenium API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine_registry = EngineRegistry(
        engines if engines is not None else default_engines(settings)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(security_headers_middleware)

    # Request id and timing
    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request.state.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start_time = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.perf_counter() - start_time)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.VERSION,
            "uptime": round(time.monotonic() - getattr(request.app.state, "started_at", time.monotonic()), 3),
        }

    @app.exception_handler(TestGeniumError)
    async def testgenium_exception_handler(request: Request, exc: TestGeniumError):
        """Render domain errors as {"error": {"kind", "message"}, ...details}"""
        extra = {
            "request_id": getattr(request.state, "request_id", None),
            "tenant_id": getattr(request.state, "tenant_id", None),
        }
        if isinstance(exc, StoreConflict):
            logger.error(f"Store conflict: {exc.message}", extra=extra)
        else:
            logger.info(f"{exc.kind}: {exc.message}", extra=extra)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.exception(
            "Unhandled exception while handling request",
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "testgenium.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().ENVIRONMENT == "development",
        log_level="info",
    )
