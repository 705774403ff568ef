# testgenium/engines/__init__.py
from testgenium.engines.base import BaseAssessmentEngine, Finding
from testgenium.engines.registry import EngineRegistry, default_engines
from testgenium.engines.stub_engine import StubAssessmentEngine

__all__ = [
    "BaseAssessmentEngine",
    "Finding",
    "EngineRegistry",
    "default_engines",
    "StubAssessmentEngine",
]
