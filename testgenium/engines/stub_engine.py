# testgenium/engines/stub_engine.py
import asyncio
from typing import Dict, List, Optional

from testgenium.core.constants import SeverityLevel
from testgenium.core.logging import logger
from testgenium.engines.base import BaseAssessmentEngine, Finding


class StubAssessmentEngine(BaseAssessmentEngine):
    """Demo engine: after a fixed delay it reports one SQL injection finding"""

    name = "stub"
    version = "1.0.0"
    description = "Fixed-result engine for demos and local development"

    def __init__(self, delay_seconds: float = 5.0):
        self.delay_seconds = delay_seconds

    async def run(
        self,
        target: str,
        profile: str,
        depth: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Finding]:
        logger.info(f"Stub engine assessing {target}", extra={"profile": profile, "depth": depth})
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        return [
            Finding(
                type="SQL Injection",
                severity=SeverityLevel.HIGH,
                payload="' OR '1'='1",
                description="Possible SQL injection vulnerability detected",
                recommendation="Use prepared statements and validate all input",
                url=target,
            )
        ]
