"""Store ports for processing records and lead records.

The message processor talks to persistence only through these interfaces;
the SQL repositories in infrastructure.repositories implement them, tests use
in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set
from uuid import UUID

from .status import ProcessingStatus


@dataclass
class ProcessingRecord:
    """Snapshot of one message's processing record.

    Attributes:
        message_id: Mailbox message id (unique)
        status: Current ProcessingStatus
        attempts: Number of attempts started so far (never decreases)
        last_attempt_at: When the latest attempt started
        error_log: Rendered error of the last failed attempt (FAILED only)
        processed_at: When the message was first seen
    """
    message_id: str
    status: ProcessingStatus
    attempts: int
    last_attempt_at: Optional[datetime] = None
    error_log: Optional[str] = None
    processed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProcessingStorePort(ABC):
    """Persistence for the per-message processing state machine."""

    @abstractmethod
    def get(self, message_id: str) -> Optional[ProcessingRecord]:
        pass

    @abstractmethod
    def begin_attempt(self, message_id: str, now: datetime, replay: bool = False) -> ProcessingRecord:
        """Create or reopen the record: attempts + 1, status PROCESSING, error cleared.

        Must be durable (committed) before the caller does any other work.

        Raises:
            InvalidTransitionError: If the record is SUCCESS and replay is False
        """
        pass

    @abstractmethod
    def mark_success(self, message_id: str, now: datetime) -> None:
        pass

    @abstractmethod
    def mark_failed(self, message_id: str, error: str, now: datetime) -> None:
        pass

    @abstractmethod
    def successful_ids(self, message_ids: Iterable[str]) -> Set[str]:
        """Subset of message_ids whose record is SUCCESS."""
        pass

    @abstractmethod
    def list_retryable(self, max_attempts: int, limit: int) -> List[ProcessingRecord]:
        """FAILED records with attempts < max_attempts, oldest last attempt first."""
        pass

    @abstractmethod
    def list_failed(self, limit: int) -> List[ProcessingRecord]:
        """FAILED records, most recent attempt first."""
        pass

    @abstractmethod
    def count_by_status(self, since: Optional[datetime] = None) -> Dict[str, int]:
        """Record counts keyed by status value, optionally for records first seen since."""
        pass

    @abstractmethod
    def purge_successful_before(self, cutoff: datetime) -> int:
        """Delete SUCCESS records first seen before cutoff; returns rows deleted."""
        pass


@dataclass
class LeadUpsert:
    """Incoming lead values for an upsert keyed by email."""
    email: str
    source: str
    source_message: str
    assigned_agent_id: UUID
    assigned_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    raw_data: Dict[str, str] = field(default_factory=dict)


@dataclass
class LeadRecord:
    """Snapshot of a stored lead."""
    id: UUID
    email: str
    source: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    source_message: Optional[str] = None
    raw_data: Dict[str, str] = field(default_factory=dict)
    assigned_agent_id: Optional[UUID] = None
    assigned_at: Optional[datetime] = None
    reply_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created: bool = False  # True when the upsert inserted the row


class LeadStorePort(ABC):
    """Persistence for lead records (email is the natural key)."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[LeadRecord]:
        pass

    @abstractmethod
    def upsert(self, incoming: LeadUpsert, now: datetime) -> LeadRecord:
        """Insert, or merge into the existing lead with the same email.

        Merge rules are those of merge_lead_values. An insert that loses a race
        against a concurrent insert of the same email re-reads and merges.
        """
        pass

    @abstractmethod
    def mark_reply_sent(self, lead_id: UUID, now: datetime) -> None:
        pass

    @abstractmethod
    def count_created_since(self, since: datetime) -> int:
        pass

    @abstractmethod
    def list_recent(self, limit: int) -> List[LeadRecord]:
        pass


def merge_lead_values(existing: LeadRecord, incoming: LeadUpsert) -> Dict[str, object]:
    """Column values for re-processing a lead that already exists.

    Non-null incoming names and phone overwrite; null ones keep the stored
    value. Source, source message and assignment are always overwritten.
    Extra fields merge key-wise with incoming keys winning.
    """
    raw_data = dict(existing.raw_data or {})
    raw_data.update(incoming.raw_data or {})

    return {
        "first_name": incoming.first_name if incoming.first_name is not None else existing.first_name,
        "last_name": incoming.last_name if incoming.last_name is not None else existing.last_name,
        "phone": incoming.phone if incoming.phone is not None else existing.phone,
        "source": incoming.source,
        "source_message": incoming.source_message,
        "assigned_agent_id": incoming.assigned_agent_id,
        "assigned_at": incoming.assigned_at,
        "raw_data": raw_data,
    }
