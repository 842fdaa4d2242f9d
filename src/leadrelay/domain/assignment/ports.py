"""Roster store port for round-robin assignment."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID


@dataclass
class Recipient:
    """Snapshot of a team member eligible for lead assignment.

    Attributes:
        id: Agent UUID
        name: Display name used in the acknowledgment reply
        email: Contact email (unique)
        booking_url: Scheduling link for the reply (optional)
        is_active: Only active recipients take part in selection
        assigned_count: Number of leads assigned so far
        last_assigned_at: When the recipient was last selected (None = never)
    """
    id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    booking_url: Optional[str] = None
    is_active: bool = True
    assigned_count: int = 0
    last_assigned_at: Optional[datetime] = None


class RosterStorePort(ABC):
    """Port interface for the recipient roster."""

    @abstractmethod
    def list_active(self) -> List[Recipient]:
        pass

    @abstractmethod
    def list_all(self) -> List[Recipient]:
        pass

    @abstractmethod
    def get(self, recipient_id: UUID) -> Optional[Recipient]:
        pass

    @abstractmethod
    def mark_assigned(self, recipient: Recipient, now: datetime) -> bool:
        """Compare-and-swap the assignment bookkeeping.

        Increments assigned_count and sets last_assigned_at = now, but only if
        the stored count and timestamp still equal the snapshot's.

        Returns:
            True if the update was applied, False if another writer got there first
        """
        pass
