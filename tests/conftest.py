"""Pytest fixtures for the lead relay.

Provides reusable test fixtures for:
- In-memory SQLite state store (StaticPool, schema created from the models)
- Fake mailbox, outbound sender and alert channel
- In-memory lock and roster stores for the lock and selector tests
- A fully wired service graph on top of the fakes

Usage:
    def test_something(services, mailbox):
        mailbox.add("1", text="Email: jane@example.com")
        services.processor.process("1")
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from uuid import uuid4

import pytest

from leadrelay.config import Settings
from leadrelay.database import create_session_factory
from leadrelay.domain.alerts.ports import AlertPort, FailureNotification
from leadrelay.domain.assignment.ports import Recipient, RosterStorePort
from leadrelay.domain.locking.ports import LockRecord, LockStorePort
from leadrelay.domain.mailbox.ports import (
    MailboxPort,
    MailTransportError,
    MessageContent,
    MessageRef,
    OutboundMailPort,
    OutboundMessage,
)
from leadrelay.models import Base
from leadrelay.workers.bootstrap import build_services


class FakeClock:
    """Settable clock; call it like datetime.now(timezone.utc)."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FakeMailbox(MailboxPort):
    """Mailbox holding MessageContent objects in insertion order.

    Acknowledged messages stop being candidates unless mark_read_on_ack is False.
    """

    def __init__(self):
        self.messages: Dict[str, MessageContent] = {}
        self.acknowledged: List[str] = []
        self.listed_queries: List[Optional[str]] = []
        self.mark_read_on_ack = True
        self.list_error: Optional[Exception] = None
        self.ack_error: Optional[Exception] = None

    def add(self, message_id: str, text: Optional[str] = None, subject: str = "", **kwargs) -> MessageContent:
        content = MessageContent(message_id=message_id, text=text, subject=subject, **kwargs)
        self.messages[message_id] = content
        return content

    def list_candidate_messages(self, query, limit):
        self.listed_queries.append(query)
        if self.list_error:
            raise self.list_error
        ids = [
            message_id for message_id in self.messages
            if not (self.mark_read_on_ack and message_id in self.acknowledged)
        ]
        return [MessageRef(id=message_id) for message_id in ids[:limit]]

    def fetch_full_content(self, message_id):
        if message_id not in self.messages:
            raise MailTransportError(f"No content returned for message {message_id}")
        return self.messages[message_id]

    def acknowledge(self, message_id):
        if self.ack_error:
            raise self.ack_error
        self.acknowledged.append(message_id)


class FakeOutbound(OutboundMailPort):
    """Records sent messages; raises send_error when set."""

    def __init__(self):
        self.sent: List[OutboundMessage] = []
        self.send_error: Optional[Exception] = None

    def send(self, message):
        if self.send_error:
            raise self.send_error
        self.sent.append(message)
        return f"<sent-{len(self.sent)}@test>"


class RecordingAlerter(AlertPort):
    """Alert channel that remembers what it was asked to send."""

    def __init__(self, fail: bool = False):
        self.failures: List[FailureNotification] = []
        self.summaries = []
        self.fail = fail

    def notify_failure(self, notification):
        if self.fail:
            raise RuntimeError("webhook down")
        self.failures.append(notification)

    def notify_run_summary(self, summary):
        if self.fail:
            raise RuntimeError("webhook down")
        self.summaries.append(summary)


class InMemoryLockStore(LockStorePort):
    """Lock store whose conditional writes are atomic under a threading.Lock."""

    def __init__(self):
        self.records: Dict[str, LockRecord] = {}
        self._mutex = threading.Lock()

    def try_acquire(self, name, holder_id, now, expires_at):
        with self._mutex:
            current = self.records.get(name)
            if current is not None and current.expires_at > now:
                return False
            self.records[name] = LockRecord(name=name, locked_by=holder_id, expires_at=expires_at)
            return True

    def release(self, name, released_at):
        with self._mutex:
            if name in self.records:
                self.records[name] = LockRecord(name=name, locked_by=None, expires_at=released_at)

    def extend(self, name, holder_id, expires_at):
        with self._mutex:
            current = self.records.get(name)
            if current is None or current.locked_by != holder_id:
                return False
            self.records[name] = LockRecord(name=name, locked_by=holder_id, expires_at=expires_at)
            return True

    def get(self, name):
        return self.records.get(name)


class InMemoryRosterStore(RosterStorePort):
    """Roster with compare-and-swap on (assigned_count, last_assigned_at)."""

    def __init__(self, recipients: Optional[List[Recipient]] = None):
        self.recipients: Dict = {r.id: r for r in recipients or []}
        self.cas_failures = 0  # number of upcoming mark_assigned calls to reject

    def add(self, name: str, last_assigned_at: Optional[datetime] = None, is_active: bool = True,
            assigned_count: int = 0) -> Recipient:
        recipient = Recipient(
            id=uuid4(),
            name=name,
            email=f"{name.lower().replace(' ', '.')}@agency.example",
            booking_url=f"https://cal.example/{name.lower()}",
            is_active=is_active,
            assigned_count=assigned_count,
            last_assigned_at=last_assigned_at,
        )
        self.recipients[recipient.id] = recipient
        return recipient

    def _copy(self, recipient: Recipient) -> Recipient:
        return Recipient(**vars(recipient))

    def list_active(self):
        return [self._copy(r) for r in self.recipients.values() if r.is_active]

    def list_all(self):
        return [self._copy(r) for r in self.recipients.values()]

    def get(self, recipient_id):
        recipient = self.recipients.get(recipient_id)
        return self._copy(recipient) if recipient else None

    def mark_assigned(self, recipient, now):
        if self.cas_failures:
            self.cas_failures -= 1
            return False
        stored = self.recipients.get(recipient.id)
        if stored is None or not stored.is_active:
            return False
        if (stored.assigned_count, stored.last_assigned_at) != (
            recipient.assigned_count,
            recipient.last_assigned_at,
        ):
            return False
        stored.assigned_count += 1
        stored.last_assigned_at = now
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test."""
    factory = create_session_factory("sqlite://")
    engine = factory.kw["bind"]
    Base.metadata.create_all(engine)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        RATE_LIMIT_MS=0,
        RETRY_MAX_ATTEMPTS=3,
        RETRY_BATCH_SIZE=10,
        MAX_MESSAGES_PER_RUN=50,
        SENDER_EMAIL="leads@agency.example",
        SENDER_NAME="Acme Realty",
        DEFAULT_BOOKING_URL="https://cal.example/acme",
        SLACK_WEBHOOK_URL=None,
        DISCORD_WEBHOOK_URL=None,
        LOG_JSON=False,
    )


@pytest.fixture
def mailbox():
    return FakeMailbox()


@pytest.fixture
def outbound():
    return FakeOutbound()


@pytest.fixture
def alerter():
    return RecordingAlerter()


@pytest.fixture
def lock_store():
    return InMemoryLockStore()


@pytest.fixture
def roster_store():
    return InMemoryRosterStore()


@pytest.fixture
def services(settings, session_factory, mailbox, outbound, alerter):
    """Service graph on SQLite with fake transports and a no-op pacing sleep."""
    graph = build_services(
        settings,
        session_factory=session_factory,
        mailbox=mailbox,
        outbound=outbound,
        alerter=alerter,
    )
    graph.coordinator.sleep = lambda seconds: None
    return graph


@pytest.fixture
def seeded_services(services):
    """Services with two active agents on the roster."""
    services.roster.add_agent(name="Alice Agent", email="alice@agency.example",
                              booking_url="https://cal.example/alice")
    services.roster.add_agent(name="Bob Broker", email="bob@agency.example")
    return services
