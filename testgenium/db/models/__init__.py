# testgenium/db/models/__init__.py
from testgenium.db.models.tenant import Tenant
from testgenium.db.models.job import Job

__all__ = ["Tenant", "Job"]
