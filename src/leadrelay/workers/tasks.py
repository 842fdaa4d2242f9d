"""Celery tasks for the lead relay.

Tasks:
- leads.run_once: one coordinator run (scheduled every RUN_SCHEDULE_SECONDS)
- leads.process_one: manual replay of a single message
- leads.daily_digest: failure digest with re-alerts for exhausted messages
- leads.purge_processed: delete old SUCCESS processing records
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict

from celery import shared_task

from ..config import get_settings
from ..observability.run_context import run_scope
from .bootstrap import LeadRelayServices, build_services

logger = logging.getLogger(__name__)

DEFAULT_PURGE_AFTER_DAYS = 30


@lru_cache()
def get_services() -> LeadRelayServices:
    """Service graph shared by all tasks in this worker process."""
    return build_services(get_settings())


@shared_task(name="leads.run_once", bind=True)
def run_once_task(self) -> Dict[str, Any]:
    """Execute one coordinator run.

    Overlapping runs are harmless: the run lock turns the second one into a
    no-op summary with lock_acquired=False.
    """
    summary = get_services().coordinator.run()
    return summary.to_dict()


@shared_task(name="leads.process_one", bind=True)
def process_one_task(self, message_id: str) -> Dict[str, Any]:
    """Replay one message, even if it already succeeded (the reply guard still applies)."""
    with run_scope():
        result = get_services().processor.process(message_id, replay=True)

    return {
        "message_id": result.message_id,
        "success": result.success,
        "attempts": result.attempts,
        "lead_id": str(result.lead_id) if result.lead_id else None,
        "recipient_name": result.recipient_name,
        "error": result.error,
    }


@shared_task(name="leads.daily_digest", bind=True)
def daily_digest_task(self) -> Dict[str, Any]:
    with run_scope():
        realerted = get_services().reporting.send_daily_digest()
    return {"status": "completed", "realerted": len(realerted)}


@shared_task(name="leads.purge_processed", bind=True)
def purge_processed_task(self, older_than_days: int = DEFAULT_PURGE_AFTER_DAYS) -> Dict[str, Any]:
    """Delete SUCCESS processing records first seen more than older_than_days ago."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
    with run_scope():
        deleted = get_services().reporting.purge_successful_before(cutoff)

    logger.info(f"Purge task completed: {deleted} records deleted")
    return {"status": "completed", "deleted": deleted, "cutoff": cutoff.isoformat()}
