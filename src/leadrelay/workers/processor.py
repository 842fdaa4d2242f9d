"""Message processor - takes one inbound message end-to-end.

Pipeline per attempt:
1. Begin attempt (processing record -> PROCESSING, attempts + 1), committed first
2. Fetch full content, run the recognizer chain
3. Select a recipient round-robin
4. Upsert the lead (merge by email)
5. Send the acknowledgment unless the lead was already answered
6. Mark SUCCESS, then acknowledge at the mailbox

Any failure in 2-6 before SUCCESS marks the record FAILED, leaves the message
unacknowledged and raises a best-effort alert. It never propagates to the
caller. SUCCESS is terminal, so a failed acknowledge after it is only logged;
the coordinator acknowledges SUCCESS messages the mailbox still lists.
"""

import logging
import time
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

from ..config import Settings
from ..domain.alerts.ports import AlertPort, FailureNotification, send_detached
from ..domain.assignment.selector import RoundRobinSelector
from ..domain.mailbox.ports import (
    MailboxPort,
    MailTransportError,
    MessageContent,
    OutboundMailPort,
    ReplyDispatchError,
)
from ..domain.parsing import EmptyMessageError, LeadCandidate, parse_lead_from_text, strip_html_tags
from ..domain.processing.ports import LeadRecord, LeadStorePort, LeadUpsert, ProcessingStorePort
from ..domain.processing.status import InvalidTransitionError
from ..domain.replies import build_acknowledgment
from ..observability.metrics import (
    leads_upserted_total,
    message_processing_duration_seconds,
    messages_processed_total,
    replies_sent_total,
    replies_skipped_total,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def render_error(error: BaseException) -> str:
    """Type name, message and traceback of an exception, as stored in error_log."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).strip()


@dataclass
class ProcessResult:
    """Outcome of processing one message.

    Attributes:
        message_id: Mailbox message id
        success: True if the message reached SUCCESS (or already was SUCCESS)
        attempts: Attempt counter after this attempt
        lead_id: Stored lead (success only)
        recipient_name: Assigned agent (success only)
        error: Rendered error (failure only)
        skipped: True if the message was already SUCCESS and nothing was done
        acknowledged: False if SUCCESS was recorded but the mailbox flag update failed
    """
    message_id: str
    success: bool
    attempts: int = 0
    lead_id: Optional[UUID] = None
    recipient_name: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False
    acknowledged: bool = True


class MessageProcessor:
    """Processes a single mailbox message.

    Example:
        processor = MessageProcessor(settings, mailbox, sender, selector, leads, processing, alerter)
        result = processor.process("1042")
    """

    def __init__(
        self,
        settings: Settings,
        mailbox: MailboxPort,
        outbound: OutboundMailPort,
        selector: RoundRobinSelector,
        leads: LeadStorePort,
        processing: ProcessingStorePort,
        alerter: AlertPort,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings
        self.mailbox = mailbox
        self.outbound = outbound
        self.selector = selector
        self.leads = leads
        self.processing = processing
        self.alerter = alerter
        self.clock = clock

    def process(self, message_id: str, replay: bool = False) -> ProcessResult:
        """Process one message.

        Args:
            message_id: Mailbox message id
            replay: Manual replay; reopens a SUCCESS record (the reply guard still applies)

        Returns:
            ProcessResult (failures are returned, not raised)

        Raises:
            Errors from the processing store while opening the attempt. Nothing
            has been done to the message at that point.
        """
        start_time = time.monotonic()

        try:
            record = self.processing.begin_attempt(message_id, self.clock(), replay=replay)
        except InvalidTransitionError:
            logger.info(f"Message {message_id} already processed, skipping", extra={"message_id": message_id})
            return ProcessResult(message_id=message_id, success=True, skipped=True)

        attempts = record.attempts
        logger.info(
            f"Processing message {message_id} (attempt {attempts})",
            extra={"message_id": message_id, "attempts": attempts},
        )

        try:
            content = self.mailbox.fetch_full_content(message_id)
            candidate = self._extract(content)
            logger.info(
                f"Extracted lead: {candidate.email} from {candidate.source.value}",
                extra={"message_id": message_id, "lead_email": candidate.email},
            )

            recipient = self.selector.select_recipient()

            lead = self.leads.upsert(
                LeadUpsert(
                    email=candidate.email,
                    first_name=candidate.first_name,
                    last_name=candidate.last_name,
                    phone=candidate.phone,
                    source=candidate.source.value,
                    source_message=message_id,
                    raw_data=candidate.raw_data,
                    assigned_agent_id=recipient.id,
                    assigned_at=self.clock(),
                ),
                self.clock(),
            )
            outcome = "created" if lead.created else "merged"
            leads_upserted_total.labels(source=lead.source, outcome=outcome).inc()
            logger.info(f"Lead {outcome}: {lead.id}", extra={"message_id": message_id, "lead_email": lead.email})

            self._reply_once(lead, recipient.name, recipient.booking_url, content)

            self.processing.mark_success(message_id, self.clock())

        except Exception as e:
            return self._fail(message_id, attempts, e, start_time)

        acknowledged = self._acknowledge(message_id)

        duration = time.monotonic() - start_time
        message_processing_duration_seconds.observe(duration)
        messages_processed_total.labels(status="success").inc()
        logger.info(
            f"Message {message_id} processed successfully in {duration * 1000:.0f}ms",
            extra={"message_id": message_id, "agent": recipient.name},
        )

        return ProcessResult(
            message_id=message_id,
            success=True,
            attempts=attempts,
            lead_id=lead.id,
            recipient_name=recipient.name,
            acknowledged=acknowledged,
        )

    def _acknowledge(self, message_id: str) -> bool:
        try:
            self.mailbox.acknowledge(message_id)
            return True
        except Exception as e:
            logger.error(
                f"Message {message_id} processed but not acknowledged: {e}",
                extra={"message_id": message_id},
                exc_info=True,
            )
            return False

    def _extract(self, content: MessageContent) -> LeadCandidate:
        """Run the recognizer chain on the plain-text body, or the stripped HTML body."""
        text = content.text or ""
        if not text.strip() and content.html:
            text = strip_html_tags(content.html)

        if not text.strip():
            raise EmptyMessageError(f"Email {content.message_id} parsed but has no body text or HTML")

        return parse_lead_from_text(text, content.subject or "")

    def _reply_once(
        self,
        lead: LeadRecord,
        agent_name: str,
        booking_url: Optional[str],
        inbound: MessageContent,
    ) -> None:
        if lead.reply_sent_at is not None:
            replies_skipped_total.inc()
            logger.info(
                f"Skipped sending reply (already sent at {lead.reply_sent_at.isoformat()})",
                extra={"lead_email": lead.email},
            )
            return

        outbound = build_acknowledgment(
            to=lead.email,
            from_address=self.settings.sender_address,
            subject=self.settings.REPLY_SUBJECT,
            agent_name=agent_name,
            booking_url=booking_url or self.settings.DEFAULT_BOOKING_URL,
            inbound=inbound,
        )

        try:
            self.outbound.send(outbound)
        except MailTransportError as e:
            raise ReplyDispatchError(f"Reply to {lead.email} failed: {e}") from e

        self.leads.mark_reply_sent(lead.id, self.clock())
        replies_sent_total.inc()
        logger.info(f"Reply sent to {lead.email}", extra={"lead_email": lead.email})

    def _fail(self, message_id: str, attempts: int, error: Exception, start_time: float) -> ProcessResult:
        error_text = render_error(error)
        logger.error(
            f"Failed to process message {message_id}: {type(error).__name__}: {error}",
            extra={"message_id": message_id, "attempts": attempts},
        )

        self.processing.mark_failed(message_id, error_text, self.clock())

        message_processing_duration_seconds.observe(time.monotonic() - start_time)
        messages_processed_total.labels(status="failed").inc()

        send_detached(
            self.alerter.notify_failure,
            FailureNotification(message_id=message_id, error=error_text, attempts=attempts),
        )

        return ProcessResult(
            message_id=message_id,
            success=False,
            attempts=attempts,
            error=error_text,
        )
