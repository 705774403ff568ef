# testgenium/engines/base.py
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from testgenium.core.constants import SeverityLevel


@dataclass(frozen=True)
class Finding:
    """One reported issue; only ever stored inside a job's result"""
    type: str
    severity: SeverityLevel
    description: str
    url: str
    payload: Optional[str] = None
    recommendation: Optional[str] = None

    def __post_init__(self):
        # Reject unknown severities at the engine boundary
        object.__setattr__(self, "severity", SeverityLevel(self.severity))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        return cls(
            type=data["type"],
            severity=data["severity"],
            description=data["description"],
            url=data["url"],
            payload=data.get("payload"),
            recommendation=data.get("recommendation"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


class BaseAssessmentEngine(ABC):
    """
    Abstract base class for assessment engines.

    An engine is opaque to the orchestrator: given a target, a profile and
    a depth it eventually returns the findings, or raises.
    """

    name: str
    version: str
    description: str = ""

    async def initialize(self) -> None:
        """Acquire engine resources"""
        pass

    @abstractmethod
    async def run(
        self,
        target: str,
        profile: str,
        depth: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Finding]:
        """Assess the target and return its findings in report order"""
        pass

    async def cleanup(self) -> None:
        """Release engine resources"""
        pass
