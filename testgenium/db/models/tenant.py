# testgenium/db/models/tenant.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from testgenium.core.constants import UNLIMITED
from testgenium.db.base import BaseModel


class Tenant(BaseModel):
    """
    Tenant account: identity, plan limits and usage counters.

    Usage counters are only written by the entitlement ledger at job start.
    Accounts are deactivated through ``is_active``, never deleted.
    """
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    company_name = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    plan = Column(String(50), default="basic", nullable=False, index=True)

    # Usage
    tests_this_month = Column(Integer, default=0, nullable=False)
    total_tests = Column(Integer, default=0, nullable=False)
    last_test_at = Column(DateTime, nullable=True)

    # Plan limits (tests_per_month == UNLIMITED means no monthly cap)
    tests_per_month = Column(Integer, default=10, nullable=False)
    max_concurrent_tests = Column(Integer, default=1, nullable=False)
    api_access = Column(Boolean, default=False, nullable=False)
    custom_reports = Column(Boolean, default=False, nullable=False)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Relationships
    jobs = relationship("Job", back_populates="owner")

    @property
    def has_unlimited_tests(self) -> bool:
        return self.tests_per_month == UNLIMITED

    def usage(self) -> dict:
        return {
            "testsThisMonth": self.tests_this_month,
            "totalTests": self.total_tests,
            "lastTestDate": self.last_test_at.isoformat() if self.last_test_at else None,
        }

    def limits(self) -> dict:
        return {
            "testsPerMonth": self.tests_per_month,
            "maxConcurrentTests": self.max_concurrent_tests,
            "apiAccess": self.api_access,
            "customReports": self.custom_reports,
        }
