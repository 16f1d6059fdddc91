"""Roster state machine for a single session.

Each name is in exactly one state: absent, participant, waiting, or
participant with a pending deletion request. RosterManager works on a copy
of the session; ``patch()`` returns the participant list, waiting list and
deletion requests together, so a removal and the promotion it triggers are
always written in one update.

Usage:
    roster = RosterManager(session)
    result = roster.join("Alice")
    store.patch_session(session.id, roster.patch())
"""

from collections import deque
from collections.abc import Iterable, Iterator
from enum import StrEnum

from pydantic import BaseModel

from shuttlehub import get_logger
from shuttlehub.errors import DuplicateNameError, EmptyNameError
from shuttlehub.models.session import Session, SessionPatch

logger = get_logger(__name__)


class JoinPlacement(StrEnum):
    """Where a successful join landed."""

    ROSTER = "roster"
    WAITING_LIST = "waiting_list"


class JoinResult(BaseModel):
    """Outcome of a join. ``placement`` is None when the join was ignored."""

    name: str
    placement: JoinPlacement | None = None
    position: int | None = None  # 1-based position in the list it landed in

    @property
    def accepted(self) -> bool:
        return self.placement is not None

    @property
    def waitlisted(self) -> bool:
        return self.placement == JoinPlacement.WAITING_LIST


class WaitingQueue:
    """FIFO queue of names waiting for a roster slot."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: deque[str] = deque(names)

    def enqueue(self, name: str) -> int:
        """Add a name at the back. Returns its 1-based position."""
        self._names.append(name)
        return len(self._names)

    def dequeue_front(self) -> str | None:
        """Remove and return the longest-waiting name, or None if empty."""
        if not self._names:
            return None
        return self._names.popleft()

    def remove(self, name: str) -> bool:
        if name not in self._names:
            return False
        self._names.remove(name)
        return True

    def to_list(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)


def normalize_name(name: str) -> str:
    """Trim a display name, rejecting empty input."""
    trimmed = name.strip()
    if not trimmed:
        raise EmptyNameError()
    return trimmed


class RosterManager:
    """Applies roster operations to one session.

    Operations on a completed session are no-ops. Removing a name that is
    not present is a no-op. Capacity is always judged on the participant
    list alone.
    """

    def __init__(self, session: Session):
        self.session_id = session.id
        self.completed = session.is_completed
        self.max_participants = session.max_participants
        self.participants: list[str] = list(session.participants)
        self.waiting = WaitingQueue(session.waiting_list)
        self.deletion_requests: list[str] = list(session.deletion_requests)
        self.promoted: list[str] = []
        self.changed = False

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.max_participants

    def join(self, name: str) -> JoinResult:
        """Sign a name up, on the roster if there is room, else on the waiting list.

        Raises:
            EmptyNameError: If the name is blank
            DuplicateNameError: If the name is already on either list
        """
        if self.completed:
            logger.debug("roster_join_ignored", session_id=self.session_id, name=name)
            return JoinResult(name=name.strip())

        name = normalize_name(name)
        if name in self.participants or name in self.waiting:
            raise DuplicateNameError(name)

        self.changed = True
        if not self.is_full:
            self.participants.append(name)
            return JoinResult(
                name=name, placement=JoinPlacement.ROSTER, position=len(self.participants)
            )

        position = self.waiting.enqueue(name)
        return JoinResult(name=name, placement=JoinPlacement.WAITING_LIST, position=position)

    def request_leave(self, name: str, is_admin: bool) -> None:
        """Leave the roster.

        Admins remove the name immediately. Members only file a deletion
        request; the name keeps its slot and its share of the cost until an
        admin approves it.
        """
        if self.completed:
            return
        if is_admin:
            self.remove(name)
            return

        name = name.strip()
        if name not in self.participants or name in self.deletion_requests:
            return
        self.deletion_requests.append(name)
        self.changed = True

    def remove(self, name: str, from_waiting_list: bool = False) -> None:
        """Remove a name and promote from the waiting list into any freed slot."""
        if self.completed:
            return
        name = name.strip()

        if from_waiting_list:
            self.remove_from_waiting_list(name)
            return

        if name in self.deletion_requests:
            self.deletion_requests.remove(name)
            self.changed = True

        if name not in self.participants:
            return

        self.participants.remove(name)
        self.changed = True
        self._promote()

    def approve_deletion(self, name: str) -> None:
        self.remove(name)

    def reject_deletion(self, name: str) -> None:
        """Drop a pending deletion request; the roster is unchanged."""
        if self.completed:
            return
        name = name.strip()
        if name in self.deletion_requests:
            self.deletion_requests.remove(name)
            self.changed = True

    def remove_from_waiting_list(self, name: str) -> None:
        """Remove a waiting entry. No slot opened, so nobody is promoted."""
        if self.completed:
            return
        if self.waiting.remove(name.strip()):
            self.changed = True

    def _promote(self) -> bool:
        if len(self.participants) >= self.max_participants or len(self.waiting) == 0:
            return False
        promoted = self.waiting.dequeue_front()
        self.participants.append(promoted)
        self.promoted.append(promoted)
        logger.debug("roster_promoted", session_id=self.session_id, name=promoted)
        return True

    def set_capacity(self, max_participants: int) -> None:
        """Change capacity, filling any slots it opens from the waiting list.

        A lower capacity never evicts anyone already on the roster.
        """
        self.max_participants = max_participants
        while self._promote():
            self.changed = True

    def patch(self) -> SessionPatch:
        """The roster fields as one patch."""
        return SessionPatch(
            participants=list(self.participants),
            waiting_list=self.waiting.to_list(),
            deletion_requests=list(self.deletion_requests),
        )
