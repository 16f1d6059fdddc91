"""Tests for the roster state machine."""

import pytest

from shuttlehub.errors import DuplicateNameError, EmptyNameError
from shuttlehub.models import SessionStatus
from shuttlehub.services.roster import JoinPlacement, RosterManager, WaitingQueue


@pytest.fixture
def roster(make_session) -> RosterManager:
    """Roster for an empty two-player session."""
    return RosterManager(make_session(max_participants=2))


class TestWaitingQueue:
    """Tests for the FIFO waiting queue."""

    def test_fifo_order(self):
        queue = WaitingQueue()
        assert queue.enqueue("A") == 1
        assert queue.enqueue("B") == 2
        assert queue.dequeue_front() == "A"
        assert queue.to_list() == ["B"]

    def test_dequeue_empty(self):
        assert WaitingQueue().dequeue_front() is None

    def test_remove_unknown_name(self):
        queue = WaitingQueue(["A"])
        assert queue.remove("Z") is False
        assert "A" in queue
        assert len(queue) == 1


class TestJoin:
    """Tests for joining a session."""

    def test_overflow_goes_to_waiting_list(self, roster: RosterManager):
        """Third join on a two-player session is waitlisted."""
        assert roster.join("A").placement == JoinPlacement.ROSTER
        assert roster.join("B").placement == JoinPlacement.ROSTER
        result = roster.join("C")

        assert result.waitlisted
        assert result.position == 1
        assert roster.participants == ["A", "B"]
        assert roster.waiting.to_list() == ["C"]

    def test_capacity_never_exceeded(self, make_session):
        """Any number of joins keeps the roster at capacity, excess in call order."""
        roster = RosterManager(make_session(max_participants=3))
        names = [f"P{i}" for i in range(10)]
        for name in names:
            roster.join(name)

        assert len(roster.participants) == 3
        assert roster.participants == names[:3]
        assert roster.waiting.to_list() == names[3:]

    def test_name_is_trimmed(self, roster: RosterManager):
        result = roster.join("  Alice ")
        assert result.name == "Alice"
        assert roster.participants == ["Alice"]

    def test_empty_name_rejected(self, roster: RosterManager):
        with pytest.raises(EmptyNameError):
            roster.join("   ")
        assert roster.changed is False

    def test_duplicate_on_roster_rejected(self, roster: RosterManager):
        roster.join("A")
        with pytest.raises(DuplicateNameError):
            roster.join("A")

    def test_duplicate_on_waiting_list_rejected(self, roster: RosterManager):
        for name in ("A", "B", "C"):
            roster.join(name)
        with pytest.raises(DuplicateNameError):
            roster.join(" C")
        assert roster.waiting.to_list() == ["C"]

    def test_pending_leave_still_counts_for_capacity(self, roster: RosterManager):
        """A name with a leave request keeps its slot."""
        roster.join("A")
        roster.join("B")
        roster.request_leave("A", is_admin=False)

        assert roster.join("C").waitlisted


class TestRemove:
    """Tests for removal and promotion."""

    def test_admin_remove_promotes_head(self, roster: RosterManager):
        """Removing A moves C from the waiting list onto the roster."""
        for name in ("A", "B", "C"):
            roster.join(name)
        roster.remove("A")

        assert roster.participants == ["B", "C"]
        assert roster.waiting.to_list() == []
        assert roster.promoted == ["C"]

    def test_exactly_one_promotion(self, roster: RosterManager):
        for name in ("A", "B", "C", "D", "E"):
            roster.join(name)
        roster.remove("B")

        assert roster.participants == ["A", "C"]
        assert roster.waiting.to_list() == ["D", "E"]

    def test_remove_unknown_is_noop(self, roster: RosterManager):
        roster.join("A")
        roster.changed = False
        roster.remove("Nobody")
        assert roster.participants == ["A"]
        assert roster.changed is False

    def test_remove_from_waiting_list_does_not_promote(self, roster: RosterManager):
        for name in ("A", "B", "C", "D"):
            roster.join(name)
        roster.remove("C", from_waiting_list=True)

        assert roster.participants == ["A", "B"]
        assert roster.waiting.to_list() == ["D"]

    def test_over_capacity_roster_does_not_promote(self, make_session):
        """Stored rosters above capacity shrink before anyone is promoted."""
        roster = RosterManager(
            make_session(max_participants=2, participants=["A", "B", "C"], waiting_list=["D"])
        )
        roster.remove("A")

        assert roster.participants == ["B", "C"]
        assert roster.waiting.to_list() == ["D"]


class TestDeletionRequests:
    """Tests for member leave requests."""

    def test_request_is_idempotent(self, roster: RosterManager):
        roster.join("B")
        roster.request_leave("B", is_admin=False)
        roster.request_leave("B", is_admin=False)

        assert roster.deletion_requests == ["B"]
        assert roster.participants == ["B"]

    def test_reject_keeps_participant(self, roster: RosterManager):
        roster.join("A")
        roster.join("B")
        roster.request_leave("B", is_admin=False)
        roster.reject_deletion("B")

        assert roster.participants == ["A", "B"]
        assert roster.deletion_requests == []

    def test_approve_removes_and_promotes(self, roster: RosterManager):
        for name in ("A", "B", "C"):
            roster.join(name)
        roster.request_leave("B", is_admin=False)
        roster.approve_deletion("B")

        assert roster.participants == ["A", "C"]
        assert roster.deletion_requests == []

    def test_admin_leave_removes_directly(self, roster: RosterManager):
        roster.join("A")
        roster.request_leave("A", is_admin=True)

        assert roster.participants == []
        assert roster.deletion_requests == []

    def test_request_for_non_participant_ignored(self, roster: RosterManager):
        roster.request_leave("Ghost", is_admin=False)
        assert roster.deletion_requests == []


class TestCompletedSession:
    """Roster operations on a completed session change nothing."""

    def test_all_operations_are_noops(self, make_session):
        session = make_session(
            max_participants=2,
            participants=["A", "B"],
            waiting_list=["C"],
            deletion_requests=["B"],
            status=SessionStatus.COMPLETED,
        )
        roster = RosterManager(session)

        assert roster.join("D").accepted is False
        roster.remove("A")
        roster.request_leave("A", is_admin=False)
        roster.approve_deletion("B")
        roster.reject_deletion("B")
        roster.remove_from_waiting_list("C")

        assert roster.changed is False
        patch = roster.patch()
        assert patch.participants == ["A", "B"]
        assert patch.waiting_list == ["C"]
        assert patch.deletion_requests == ["B"]

    def test_join_completed_ignores_blank_name(self, make_session):
        """Completed check runs before name validation."""
        roster = RosterManager(make_session(status=SessionStatus.COMPLETED))
        assert roster.join("  ").accepted is False


class TestCapacityChange:
    """Tests for set_capacity."""

    def test_raising_capacity_fills_slots(self, roster: RosterManager):
        for name in ("A", "B", "C", "D", "E"):
            roster.join(name)
        roster.set_capacity(4)

        assert roster.participants == ["A", "B", "C", "D"]
        assert roster.waiting.to_list() == ["E"]
        assert roster.promoted == ["C", "D"]

    def test_lowering_capacity_keeps_roster(self, roster: RosterManager):
        roster.join("A")
        roster.join("B")
        roster.set_capacity(1)

        assert roster.participants == ["A", "B"]
        assert roster.promoted == []
