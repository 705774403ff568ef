# testgenium/workers/celery_app.py
from celery import Celery

from testgenium.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "testgenium",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["testgenium.workers.assessment_worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Engine timeout plus headroom for the terminal write
    task_time_limit=int(settings.ENGINE_TIMEOUT_SECONDS) + 30,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)
