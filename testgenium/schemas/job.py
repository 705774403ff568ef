# testgenium/schemas/job.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, Field

from testgenium.core.constants import JobStatus, ProfileType, ScanDepth, SeverityLevel
from testgenium.schemas.common import CamelModel


class JobCreate(CamelModel):
    target: Optional[str] = Field(default=None, validation_alias=AliasChoices("target", "targetUrl"))
    profile: ProfileType = Field(
        default=ProfileType.COMPLETE, validation_alias=AliasChoices("profile", "testType")
    )
    depth: ScanDepth = ScanDepth.STANDARD
    headers: Optional[Dict[str, str]] = None


class JobStarted(CamelModel):
    job_id: str
    status: JobStatus
    message: str = "Job started"


class Finding(CamelModel):
    type: str
    severity: SeverityLevel
    payload: Optional[str] = None
    description: str
    recommendation: Optional[str] = None
    url: str


class SeveritySummary(CamelModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class JobResult(CamelModel):
    total_tests: int
    vulnerabilities: int
    coverage: int
    score: str
    summary: SeveritySummary


class JobView(CamelModel):
    job_id: str
    status: JobStatus
    progress: int
    target: str
    profile: ProfileType
    depth: ScanDepth
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None
    result: Optional[JobResult] = None
    findings: Optional[List[Finding]] = None
    error: Optional[str] = None


class JobSummary(CamelModel):
    job_id: str
    target: str
    profile: ProfileType
    depth: ScanDepth
    status: JobStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    vulnerabilities: int = 0
    score: str = "N/A"


class JobHistory(CamelModel):
    jobs: List[JobSummary]
    total: int
    limit: int
    offset: int
