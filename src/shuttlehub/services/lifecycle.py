"""Session lifecycle: status transitions and the time-relevance rule.

A session is shown as active while it is not completed and the current time
is before its end plus a grace period, so finished sessions stay visible for
a while for late payments and roster cleanup.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from shuttlehub.models.session import Session, SessionPatch, SessionStatus, parse_clock

DEFAULT_GRACE_PERIOD = timedelta(hours=4)


def grace_period(hours: float) -> timedelta:
    return timedelta(hours=hours)


def session_end(session: Session) -> datetime:
    """Naive local datetime at which the session ends.

    An end time of 24:00 is the following midnight.

    Raises:
        ValueError: If the stored time range cannot be parsed
    """
    minutes = parse_clock(session.end_time)
    return datetime.combine(session.date, time()) + timedelta(minutes=minutes)


def is_time_relevant(
    session: Session, now: datetime, grace: timedelta = DEFAULT_GRACE_PERIOD
) -> bool:
    """True while ``now`` is before the session end plus ``grace``.

    Sessions whose end cannot be determined stay relevant.
    """
    try:
        end = session_end(session)
    except ValueError:
        return True
    return now < end + grace


def is_history(session: Session, now: datetime, grace: timedelta = DEFAULT_GRACE_PERIOD) -> bool:
    """Completed sessions and sessions past their grace period."""
    return session.is_completed or not is_time_relevant(session, now, grace)


def sort_by_date_desc(sessions: Iterable[Session]) -> list[Session]:
    """Most recent first; same-day sessions by start time, latest first."""

    def key(session: Session) -> tuple[date, int]:
        return session.date, parse_clock(session.start_time)

    return sorted(sessions, key=key, reverse=True)


def partition_sessions(
    sessions: Iterable[Session], now: datetime, grace: timedelta = DEFAULT_GRACE_PERIOD
) -> tuple[list[Session], list[Session]]:
    """Split sessions into (active, history), each most recent first."""
    active: list[Session] = []
    history: list[Session] = []
    for session in sort_by_date_desc(sessions):
        if is_history(session, now, grace):
            history.append(session)
        else:
            active.append(session)
    return active, history


def completion_patch(session: Session) -> SessionPatch | None:
    """Patch that marks a session completed, or None if it already is.

    The transition is one-way; there is no patch back to active.
    """
    if session.is_completed:
        return None
    return SessionPatch(status=SessionStatus.COMPLETED)
