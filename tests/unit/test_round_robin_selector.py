"""Unit tests for round-robin recipient selection"""

from datetime import datetime, timedelta, timezone

import pytest

from leadrelay.domain.assignment import (
    AssignmentConflictError,
    NoEligibleRecipientError,
    RoundRobinSelector,
)

BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


class TestRoundRobinSelection:
    """Test fairness and ordering of selection"""

    def test_least_recently_assigned_goes_next(self, roster_store, clock):
        roster_store.add("Alice", last_assigned_at=BASE_TIME + timedelta(hours=2))
        roster_store.add("Bob", last_assigned_at=BASE_TIME)
        selector = RoundRobinSelector(roster_store, clock=clock)

        assert selector.select_recipient().name == "Bob"

    def test_never_assigned_first(self, roster_store, clock):
        roster_store.add("Alice", last_assigned_at=BASE_TIME)
        roster_store.add("Zed")
        selector = RoundRobinSelector(roster_store, clock=clock)

        assert selector.select_recipient().name == "Zed"

    def test_ties_broken_by_name(self, roster_store, clock):
        roster_store.add("Carol")
        roster_store.add("Alice")
        roster_store.add("Bob")
        selector = RoundRobinSelector(roster_store, clock=clock)

        assert selector.select_recipient().name == "Alice"

    def test_n_selections_visit_each_recipient_once(self, roster_store, clock):
        """Test N recipients with distinct timestamps are each selected once in N picks"""
        names = ["Alice", "Bob", "Carol", "Dave"]
        for offset, name in enumerate(names):
            roster_store.add(name, last_assigned_at=BASE_TIME + timedelta(minutes=offset))
        selector = RoundRobinSelector(roster_store, clock=clock)

        picked = []
        for _ in names:
            clock.advance(60)
            picked.append(selector.select_recipient().name)

        assert picked == names

    def test_selection_records_assignment(self, roster_store, clock):
        alice = roster_store.add("Alice", assigned_count=3)
        selector = RoundRobinSelector(roster_store, clock=clock)

        chosen = selector.select_recipient()

        assert chosen.assigned_count == 4
        assert chosen.last_assigned_at == clock.now
        stored = roster_store.get(alice.id)
        assert stored.assigned_count == 4
        assert stored.last_assigned_at == clock.now

    def test_inactive_recipients_skipped(self, roster_store, clock):
        roster_store.add("Alice", is_active=False)
        roster_store.add("Bob", last_assigned_at=BASE_TIME)
        selector = RoundRobinSelector(roster_store, clock=clock)

        assert selector.select_recipient().name == "Bob"

    def test_no_active_recipients(self, roster_store, clock):
        roster_store.add("Alice", is_active=False)
        selector = RoundRobinSelector(roster_store, clock=clock)

        with pytest.raises(NoEligibleRecipientError):
            selector.select_recipient()


class TestCompareAndSwap:
    """Test selection under concurrent roster updates"""

    def test_retries_after_lost_race(self, roster_store, clock):
        roster_store.add("Alice")
        roster_store.cas_failures = 2
        selector = RoundRobinSelector(roster_store, clock=clock, max_attempts=5)

        assert selector.select_recipient().name == "Alice"
        assert roster_store.cas_failures == 0

    def test_gives_up_after_max_attempts(self, roster_store, clock):
        roster_store.add("Alice")
        roster_store.cas_failures = 3
        selector = RoundRobinSelector(roster_store, clock=clock, max_attempts=3)

        with pytest.raises(AssignmentConflictError) as exc_info:
            selector.select_recipient()
        assert exc_info.value.attempts == 3

    def test_stale_snapshot_rejected(self, roster_store, clock):
        """Test the store refuses a write based on an outdated count"""
        alice = roster_store.add("Alice")
        stale = roster_store.get(alice.id)
        roster_store.mark_assigned(roster_store.get(alice.id), clock.now)

        assert roster_store.mark_assigned(stale, clock.advance(1)) is False
        assert roster_store.get(alice.id).assigned_count == 1


class TestAssignmentStats:
    """Test reporting helpers"""

    def test_stats_sorted_by_count(self, roster_store, clock):
        roster_store.add("Alice", assigned_count=1, last_assigned_at=BASE_TIME)
        roster_store.add("Bob", assigned_count=5, last_assigned_at=BASE_TIME)
        roster_store.add("Carol", is_active=False)
        selector = RoundRobinSelector(roster_store, clock=clock)

        stats = selector.get_assignment_stats()

        assert [s["name"] for s in stats] == ["Bob", "Alice", "Carol"]
        assert stats[0]["assigned_count"] == 5
        assert stats[0]["last_assigned_at"] == BASE_TIME.isoformat()
        assert stats[2]["is_active"] is False
        assert stats[2]["last_assigned_at"] is None

    def test_active_recipients_in_selection_order(self, roster_store, clock):
        roster_store.add("Alice", last_assigned_at=BASE_TIME)
        roster_store.add("Bob")
        selector = RoundRobinSelector(roster_store, clock=clock)

        assert [r.name for r in selector.get_active_recipients()] == ["Bob", "Alice"]
