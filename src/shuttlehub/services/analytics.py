"""Read-only roll-ups of sessions by day, month and year."""

import datetime as dt
from collections.abc import Iterable
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, computed_field

from shuttlehub.models.session import Session
from shuttlehub.services.costs import cost_per_person, total_event_cost


class Period(StrEnum):
    """Grouping granularity for period summaries."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @property
    def key_length(self) -> int:
        """Length of the ISO date prefix used as the group key."""
        return {Period.DAY: 10, Period.MONTH: 7, Period.YEAR: 4}[self]


class SessionCostRow(BaseModel):
    """Per-session cost line for the detail view."""

    session_id: str
    date: dt.date
    time: str
    location: str
    total_cost: Decimal
    participant_count: int
    cost_per_person: Decimal
    shuttle_qty: int


class PeriodSummary(BaseModel):
    """Totals for one day, month or year."""

    key: str  # "2025-03-14", "2025-03" or "2025"
    session_count: int = 0
    total_cost: Decimal = Decimal(0)
    total_participants: int = 0
    total_shuttles: int = 0
    locations: list[str] = []  # Distinct venues, first-seen order

    @computed_field
    @property
    def cost_per_person(self) -> Decimal:
        if self.total_participants == 0:
            return self.total_cost
        return self.total_cost / self.total_participants

    @computed_field
    @property
    def location_label(self) -> str:
        """Up to two venue names, with an ellipsis when there are more."""
        label = ", ".join(self.locations[:2])
        if len(self.locations) > 2:
            label += "..."
        return label


class AnalyticsSummary(BaseModel):
    """Headline numbers across all sessions."""

    session_count: int = 0
    total_cost: Decimal = Decimal(0)
    total_participants: int = 0
    avg_cost_per_session: Decimal = Decimal(0)


def session_rows(sessions: Iterable[Session]) -> list[SessionCostRow]:
    """One cost row per session, most recent date first."""
    rows = [
        SessionCostRow(
            session_id=s.id,
            date=s.date,
            time=s.time,
            location=s.location,
            total_cost=total_event_cost(s),
            participant_count=len(s.participants),
            cost_per_person=cost_per_person(s),
            shuttle_qty=s.shuttle_qty,
        )
        for s in sessions
    ]
    # Stable sort keeps store order for sessions on the same day
    return sorted(rows, key=lambda r: r.date, reverse=True)


def group_by_period(sessions: Iterable[Session], period: Period) -> list[PeriodSummary]:
    """Sum sessions per period key, most recent period first."""
    groups: dict[str, PeriodSummary] = {}

    for session in sessions:
        key = session.date.isoformat()[: period.key_length]
        group = groups.get(key)
        if group is None:
            group = groups[key] = PeriodSummary(key=key)

        group.session_count += 1
        group.total_cost += total_event_cost(session)
        group.total_participants += len(session.participants)
        group.total_shuttles += session.shuttle_qty
        if session.location not in group.locations:
            group.locations.append(session.location)

    return sorted(groups.values(), key=lambda g: g.key, reverse=True)


def summarize(sessions: Iterable[Session]) -> AnalyticsSummary:
    """Overall totals. Average cost is zero when there are no sessions."""
    sessions = list(sessions)
    total_cost = sum((total_event_cost(s) for s in sessions), Decimal(0))
    total_participants = sum(len(s.participants) for s in sessions)
    count = len(sessions)

    return AnalyticsSummary(
        session_count=count,
        total_cost=total_cost,
        total_participants=total_participants,
        avg_cost_per_session=total_cost / count if count else Decimal(0),
    )


def frequent_participants(sessions: Iterable[Session]) -> list[str]:
    """Every name that has been on a roster, alphabetically. Used for join suggestions."""
    names: set[str] = set()
    for session in sessions:
        names.update(session.participants)
    return sorted(names)
