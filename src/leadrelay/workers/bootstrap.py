"""Wiring: build the object graph from a Settings instance.

The CLI, the Celery tasks and the status API all construct their services
here, once per process.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..database import create_session_factory
from ..domain.alerts.ports import AlertPort, NullAlerter
from ..domain.assignment import RoundRobinSelector
from ..domain.locking import RunLock
from ..domain.mailbox.ports import MailboxPort, OutboundMailPort
from ..infrastructure.alerts import WebhookAlerter
from ..infrastructure.mail import ImapMailbox, SmtpSender
from ..infrastructure.repositories import (
    SqlLeadStore,
    SqlLockStore,
    SqlProcessingStore,
    SqlRosterStore,
)
from ..reporting import ReportingService
from .coordinator import RunCoordinator
from .processor import MessageProcessor


@dataclass
class LeadRelayServices:
    """Every service a process needs, built from one Settings."""
    settings: Settings
    session_factory: sessionmaker
    roster: SqlRosterStore
    leads: SqlLeadStore
    processing: SqlProcessingStore
    selector: RoundRobinSelector
    lock: RunLock
    mailbox: MailboxPort
    outbound: OutboundMailPort
    alerter: AlertPort
    processor: MessageProcessor
    coordinator: RunCoordinator
    reporting: ReportingService


def build_alerter(settings: Settings) -> AlertPort:
    if not (settings.SLACK_WEBHOOK_URL or settings.DISCORD_WEBHOOK_URL):
        return NullAlerter()
    return WebhookAlerter(
        slack_url=settings.SLACK_WEBHOOK_URL,
        discord_url=settings.DISCORD_WEBHOOK_URL,
        timeout=settings.ALERT_TIMEOUT_SECONDS,
    )


def build_mailbox(settings: Settings) -> MailboxPort:
    return ImapMailbox(
        host=settings.IMAP_HOST,
        port=settings.IMAP_PORT,
        username=settings.IMAP_USERNAME,
        password=settings.IMAP_PASSWORD,
        use_ssl=settings.IMAP_USE_SSL,
        folder=settings.IMAP_FOLDER,
    )


def build_outbound(settings: Settings) -> OutboundMailPort:
    return SmtpSender(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
    )


def build_services(
    settings: Settings,
    session_factory: Optional[sessionmaker] = None,
    mailbox: Optional[MailboxPort] = None,
    outbound: Optional[OutboundMailPort] = None,
    alerter: Optional[AlertPort] = None,
) -> LeadRelayServices:
    """Build the service graph.

    Transports and the session factory can be injected (tests, scripts);
    otherwise they are created from settings.
    """
    session_factory = session_factory or create_session_factory(settings.DATABASE_URL)
    mailbox = mailbox or build_mailbox(settings)
    outbound = outbound or build_outbound(settings)
    alerter = alerter or build_alerter(settings)

    roster = SqlRosterStore(session_factory)
    leads = SqlLeadStore(session_factory)
    processing = SqlProcessingStore(session_factory)
    selector = RoundRobinSelector(roster)
    lock = RunLock(
        SqlLockStore(session_factory),
        name=settings.LOCK_NAME,
        ttl_seconds=settings.LOCK_TTL_SECONDS,
    )

    processor = MessageProcessor(
        settings=settings,
        mailbox=mailbox,
        outbound=outbound,
        selector=selector,
        leads=leads,
        processing=processing,
        alerter=alerter,
    )
    coordinator = RunCoordinator(
        settings=settings,
        lock=lock,
        mailbox=mailbox,
        processing=processing,
        processor=processor,
        alerter=alerter,
    )
    reporting = ReportingService(
        processing=processing,
        leads=leads,
        alerter=alerter,
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
    )

    return LeadRelayServices(
        settings=settings,
        session_factory=session_factory,
        roster=roster,
        leads=leads,
        processing=processing,
        selector=selector,
        lock=lock,
        mailbox=mailbox,
        outbound=outbound,
        alerter=alerter,
        processor=processor,
        coordinator=coordinator,
        reporting=reporting,
    )
