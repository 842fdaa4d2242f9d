"""Celery application and beat schedule.

Start a worker and the scheduler with:
    celery -A leadrelay.workers.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from ..config import get_settings

settings = get_settings()

celery_app = Celery(
    "leadrelay",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["leadrelay.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
)

celery_app.conf.beat_schedule = {
    "leads-run-once": {
        "task": "leads.run_once",
        "schedule": float(settings.RUN_SCHEDULE_SECONDS),
        "options": {
            # A run that was not picked up before the next tick is redundant
            "expires": settings.RUN_SCHEDULE_SECONDS,
        },
    },
    "leads-daily-digest": {
        "task": "leads.daily_digest",
        "schedule": crontab(hour=8, minute=0),
    },
    "leads-purge-processed": {
        "task": "leads.purge_processed",
        "schedule": crontab(hour=2, minute=0),
        "options": {
            "expires": 3600,
        },
    },
}
