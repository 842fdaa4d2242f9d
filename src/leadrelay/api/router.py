"""Status and replay endpoints.

GET /status                          processing stats, 24h digest, agents, failures
POST /messages/{message_id}/replay   manual replay of one message
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends

from ..observability.metrics import failed_messages_gauge
from ..observability.run_context import run_scope
from ..schemas.status import ReplayResponse, StatusResponse
from ..workers.bootstrap import LeadRelayServices
from .dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Lead Relay"])

RECENT_FAILURES_LIMIT = 5


@router.get("/status", response_model=StatusResponse)
def get_status(services: LeadRelayServices = Depends(get_services)):
    """Operational snapshot of the relay."""
    reporting = services.reporting
    since = datetime.now(timezone.utc) - timedelta(hours=24)

    processing = reporting.get_processing_stats()
    digest = reporting.get_digest_stats(since)
    failed_messages_gauge.set(processing["failed"])

    return StatusResponse(
        lock_held=services.lock.is_locked(),
        processing=processing,
        last_24h=digest["messages"],
        leads_created_24h=digest["leads"]["created"],
        agents=services.selector.get_assignment_stats(),
        recent_failures=reporting.get_failed_message_digest(RECENT_FAILURES_LIMIT),
    )


@router.post("/messages/{message_id}/replay", response_model=ReplayResponse)
def replay_message(message_id: str, services: LeadRelayServices = Depends(get_services)):
    """Reprocess one message now, even if it already succeeded.

    The reply guard still applies: a lead that was already answered gets no
    second reply. Processing failures are reported in the body, not as HTTP errors.
    """
    with run_scope():
        logger.info(f"Manual replay requested for {message_id}", extra={"message_id": message_id})
        result = services.processor.process(message_id, replay=True)

    return ReplayResponse(
        message_id=result.message_id,
        success=result.success,
        attempts=result.attempts,
        lead_id=str(result.lead_id) if result.lead_id else None,
        recipient_name=result.recipient_name,
        error=result.error,
        skipped=result.skipped,
    )
