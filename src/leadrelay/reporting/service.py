"""Reporting service: processing stats, failure digest, maintenance purge.

Backs the `leadrelay status` command, the status API and the daily digest
task. Read-only except for purge_successful_before, which only ever deletes
SUCCESS processing records (leads are never deleted).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from ..domain.alerts.ports import AlertPort, FailureNotification, send_detached
from ..domain.processing.ports import LeadStorePort, ProcessingStorePort
from ..domain.processing.status import ProcessingStatus

logger = logging.getLogger(__name__)

DIGEST_ERROR_LENGTH = 200
DIGEST_PREFIX = "[Daily Digest] "


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def truncate_digest_error(error: str) -> str:
    if not error:
        return ""
    return error[:DIGEST_ERROR_LENGTH] + ("..." if len(error) > DIGEST_ERROR_LENGTH else "")


def format_success_rate(successful: int, total: int) -> str:
    """Percentage with one decimal, or "N/A" when nothing was processed."""
    if total <= 0:
        return "N/A"
    return f"{successful / total * 100:.1f}%"


class ReportingService:
    """Statistics and digests over the processing and lead stores."""

    def __init__(
        self,
        processing: ProcessingStorePort,
        leads: LeadStorePort,
        alerter: AlertPort,
        max_attempts: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.processing = processing
        self.leads = leads
        self.alerter = alerter
        self.max_attempts = max_attempts
        self.clock = clock

    def get_processing_stats(self) -> Dict[str, int]:
        """Record counts by status, plus total."""
        counts = self.processing.count_by_status()
        stats = {status.value.lower(): counts.get(status.value, 0) for status in ProcessingStatus}
        stats["total"] = sum(stats.values())
        return stats

    def get_failed_message_digest(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent FAILED records, errors truncated to 200 characters."""
        return [
            {
                "message_id": record.message_id,
                "attempts": record.attempts,
                "last_attempt_at": record.last_attempt_at.isoformat() if record.last_attempt_at else None,
                "error": truncate_digest_error(record.error_log or ""),
            }
            for record in self.processing.list_failed(limit)
        ]

    def get_digest_stats(self, since: datetime) -> Dict[str, Any]:
        """Message outcomes and lead creations for records first seen since `since`."""
        counts = self.processing.count_by_status(since=since)
        total = sum(counts.values())
        success = counts.get(ProcessingStatus.SUCCESS.value, 0)
        failed = counts.get(ProcessingStatus.FAILED.value, 0)

        return {
            "period": {
                "from": since.isoformat(),
                "to": self.clock().isoformat(),
            },
            "messages": {
                "total": total,
                "success": success,
                "failed": failed,
                "success_rate": format_success_rate(success, total),
            },
            "leads": {
                "created": self.leads.count_created_since(since),
            },
        }

    def send_daily_digest(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Log the failure digest and re-alert records that exhausted their retries.

        Returns:
            The digest entries that were re-alerted
        """
        digest = self.get_failed_message_digest(limit)
        if not digest:
            logger.info("No failed messages to report")
            return []

        logger.info(f"{len(digest)} failed messages in digest")
        for entry in digest:
            logger.info(
                f"  - {entry['message_id']}: {entry['attempts']} attempts, error: {entry['error']}",
                extra={"message_id": entry["message_id"]},
            )

        exhausted = [entry for entry in digest if entry["attempts"] >= self.max_attempts]
        for entry in exhausted:
            send_detached(
                self.alerter.notify_failure,
                FailureNotification(
                    message_id=entry["message_id"],
                    error=DIGEST_PREFIX + (entry["error"] or "Unknown error"),
                    attempts=entry["attempts"],
                    timestamp=self.clock(),
                ),
            )
        return exhausted

    def purge_successful_before(self, cutoff: datetime) -> int:
        deleted = self.processing.purge_successful_before(cutoff)
        logger.info(f"Deleted {deleted} old successful processing records")
        return deleted
