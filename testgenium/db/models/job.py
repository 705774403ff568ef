# testgenium/db/models/job.py
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from testgenium.db.base import BaseModel


class Job(BaseModel):
    """
    Assessment job owned by exactly one tenant.

    Created already ``running``; the only later write is the single terminal
    transition to ``completed`` or ``failed``, which sets the result, the
    findings and the completion timestamps together.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed')",
            name="jobs_status_check"
        ),
        CheckConstraint(
            "progress >= 0 AND progress <= 100",
            name="jobs_progress_range"
        ),
    )

    id = Column(String(64), primary_key=True, index=True)
    owner_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)

    # Request
    target = Column(String(2048), nullable=False)
    profile = Column(String(32), nullable=False, default="complete")
    depth = Column(String(32), nullable=False, default="standard")
    headers = Column(JSON, nullable=True)

    # Lifecycle
    status = Column(String(20), nullable=False, default="running", index=True)
    progress = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=True)

    # Outcome
    result = Column(JSON, nullable=True)
    findings = Column(JSON, nullable=True)
    findings_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)

    # Relationships
    owner = relationship("Tenant", back_populates="jobs")
