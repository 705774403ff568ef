# testgenium/core/constants.py
from enum import Enum
from typing import Dict, Any


# Sentinel for "no monthly limit"
UNLIMITED = -1


class PlanType(str, Enum):
    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class ProfileType(str, Enum):
    COMPLETE = "complete"
    SECURITY = "security"
    PERFORMANCE = "performance"
    FUNCTIONAL = "functional"


class ScanDepth(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    DEEP = "deep"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


class SeverityLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Plan Limits Configuration
PLAN_LIMITS: Dict[str, Dict[str, Any]] = {
    PlanType.BASIC: {
        "tests_per_month": 10,
        "max_concurrent_tests": 1,
        "api_access": False,
        "custom_reports": False,
    },
    PlanType.PROFESSIONAL: {
        "tests_per_month": 50,
        "max_concurrent_tests": 3,
        "api_access": True,
        "custom_reports": False,
    },
    PlanType.ENTERPRISE: {
        "tests_per_month": UNLIMITED,
        "max_concurrent_tests": 10,
        "api_access": True,
        "custom_reports": True,
    },
}


# Checks an engine runs for a profile at standard depth
PROFILE_CHECKS: Dict[str, int] = {
    ProfileType.COMPLETE: 12,
    ProfileType.SECURITY: 8,
    ProfileType.PERFORMANCE: 4,
    ProfileType.FUNCTIONAL: 6,
}

DEPTH_CHECK_FACTOR: Dict[str, float] = {
    ScanDepth.BASIC: 0.5,
    ScanDepth.STANDARD: 1.0,
    ScanDepth.DEEP: 2.0,
}

# Share of the target surface a run of each depth covers, in percent
DEPTH_COVERAGE: Dict[str, int] = {
    ScanDepth.BASIC: 60,
    ScanDepth.STANDARD: 85,
    ScanDepth.DEEP: 95,
}

MAX_TARGET_LENGTH = 2048
