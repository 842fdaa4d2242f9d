"""Round-robin recipient selection.

The recipient assigned least recently goes next. Recipients who have never
been assigned come first; ties are broken by name, then id, so the order is
deterministic.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import UUID

from leadrelay.exceptions import LeadRelayError

from .ports import Recipient, RosterStorePort

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class NoEligibleRecipientError(LeadRelayError):
    """No active recipients are available for assignment."""

    def __init__(self):
        super().__init__("No active agents available for assignment")


class AssignmentConflictError(LeadRelayError):
    """Selection kept losing the compare-and-swap against concurrent writers."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not record assignment after {attempts} attempts (concurrent updates)")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def selection_key(recipient: Recipient):
    """Sort key: never-assigned first, then oldest assignment, then name, then id."""
    never_assigned = recipient.last_assigned_at is None
    timestamp = recipient.last_assigned_at.timestamp() if recipient.last_assigned_at else 0.0
    return (not never_assigned, timestamp, recipient.name, str(recipient.id))


class RoundRobinSelector:
    """Fair round-robin selection over the active roster.

    Example:
        selector = RoundRobinSelector(SqlRosterStore(session_factory))
        agent = selector.select_recipient()
    """

    def __init__(
        self,
        roster: RosterStorePort,
        clock: Callable[[], datetime] = _utcnow,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.roster = roster
        self.clock = clock
        self.max_attempts = max_attempts

    def select_recipient(self) -> Recipient:
        """Pick the next recipient and record the assignment atomically.

        Returns:
            The selected recipient, with count and timestamp already updated

        Raises:
            NoEligibleRecipientError: If no active recipients exist
            AssignmentConflictError: If every compare-and-swap attempt lost a race
        """
        for attempt in range(1, self.max_attempts + 1):
            active = self.roster.list_active()
            if not active:
                raise NoEligibleRecipientError()

            chosen = min(active, key=selection_key)
            now = self.clock()

            if self.roster.mark_assigned(chosen, now):
                logger.info(
                    f"Assigned to agent {chosen.name} "
                    f"(previous count {chosen.assigned_count}, attempt {attempt})"
                )
                chosen.assigned_count += 1
                chosen.last_assigned_at = now
                return chosen

            logger.debug(f"Lost assignment race for agent {chosen.name}, retrying")

        raise AssignmentConflictError(self.max_attempts)

    def get_active_recipients(self) -> List[Recipient]:
        """Active recipients in the order they would next be selected."""
        return sorted(self.roster.list_active(), key=selection_key)

    def get_recipient(self, recipient_id: UUID) -> Optional[Recipient]:
        return self.roster.get(recipient_id)

    def get_assignment_stats(self) -> List[Dict[str, object]]:
        """Per-agent assignment counts, most assigned first."""
        recipients = sorted(self.roster.list_all(), key=lambda r: (-r.assigned_count, r.name))
        return [
            {
                "id": str(r.id),
                "name": r.name,
                "email": r.email,
                "is_active": r.is_active,
                "assigned_count": r.assigned_count,
                "last_assigned_at": r.last_assigned_at.isoformat() if r.last_assigned_at else None,
            }
            for r in recipients
        ]
