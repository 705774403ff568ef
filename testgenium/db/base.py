# testgenium/db/base.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable across SQLite and Postgres columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(Base):
    """Abstract base model with common fields"""
    __abstract__ = True

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
