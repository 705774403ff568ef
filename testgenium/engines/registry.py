# testgenium/engines/registry.py
from typing import Dict, Iterable, List

from testgenium.core.config import Settings
from testgenium.core.logging import logger
from testgenium.engines.base import BaseAssessmentEngine
from testgenium.engines.stub_engine import StubAssessmentEngine


def default_engines(settings: Settings) -> List[BaseAssessmentEngine]:
    """Built-in engines available to every deployment"""
    return [StubAssessmentEngine(delay_seconds=settings.STUB_ENGINE_DELAY_SECONDS)]


class EngineRegistry:
    """Registry of assessment engines, keyed by name"""

    def __init__(self, engines: Iterable[BaseAssessmentEngine] = ()):
        self._engines: Dict[str, BaseAssessmentEngine] = {}
        self._initialized = False
        for engine in engines:
            self.register(engine)

    def register(self, engine: BaseAssessmentEngine) -> None:
        self._engines[engine.name] = engine

    async def initialize(self) -> None:
        """Initialize all registered engines"""
        if self._initialized:
            return

        logger.info("Initializing assessment engines")
        for engine in self._engines.values():
            await engine.initialize()
            logger.info(f"Registered engine: {engine.name} v{engine.version}")

        self._initialized = True

    def get(self, name: str) -> BaseAssessmentEngine:
        try:
            return self._engines[name]
        except KeyError:
            raise LookupError(
                f"Unknown assessment engine {name!r}; registered: {sorted(self._engines)}"
            ) from None

    async def cleanup_all(self) -> None:
        """Cleanup all engines"""
        for engine in self._engines.values():
            await engine.cleanup()
        self._initialized = False
