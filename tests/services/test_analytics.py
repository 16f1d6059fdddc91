"""Tests for analytics roll-ups."""

from datetime import date
from decimal import Decimal

from shuttlehub.services.analytics import (
    Period,
    frequent_participants,
    group_by_period,
    session_rows,
    summarize,
)


class TestSessionRows:
    """Tests for per-session cost rows."""

    def test_rows_most_recent_first(self, make_session):
        older = make_session(date=date(2025, 1, 10), participants=["A"])
        newer = make_session(date=date(2025, 2, 10), participants=["A", "B"])

        rows = session_rows([older, newer])

        assert [r.session_id for r in rows] == [newer.id, older.id]
        assert rows[0].total_cost == Decimal("110")
        assert rows[0].cost_per_person == Decimal("55")
        assert rows[0].participant_count == 2


class TestGrouping:
    """Tests for day, month and year groups."""

    def test_group_by_month(self, make_session):
        sessions = [
            make_session(date=date(2025, 3, 1), location="SRC", participants=["A", "B"]),
            make_session(date=date(2025, 3, 8), location="Perfect Win", participants=["A"]),
            make_session(date=date(2025, 2, 22), location="SRC", participants=["C"]),
        ]

        groups = group_by_period(sessions, Period.MONTH)

        assert [g.key for g in groups] == ["2025-03", "2025-02"]
        march = groups[0]
        assert march.session_count == 2
        assert march.total_cost == Decimal("220")
        assert march.total_participants == 3
        assert march.total_shuttles == 6
        assert march.locations == ["SRC", "Perfect Win"]

    def test_group_by_year_and_day(self, make_session):
        sessions = [
            make_session(date=date(2024, 12, 31)),
            make_session(date=date(2025, 1, 1)),
        ]
        assert [g.key for g in group_by_period(sessions, Period.YEAR)] == ["2025", "2024"]
        assert [g.key for g in group_by_period(sessions, Period.DAY)] == ["2025-01-01", "2024-12-31"]

    def test_period_share_without_participants(self, make_session):
        """A period with no sign-ups reports its whole cost per person."""
        groups = group_by_period([make_session(participants=[])], Period.MONTH)
        assert groups[0].cost_per_person == Decimal("110")

    def test_location_label_truncates(self, make_session):
        sessions = [make_session(location=name) for name in ("SRC", "Perfect Win", "Arena")]
        group = group_by_period(sessions, Period.MONTH)[0]
        assert group.location_label == "SRC, Perfect Win..."


class TestSummary:
    """Tests for headline totals."""

    def test_summary(self, make_session):
        sessions = [
            make_session(participants=["A", "B"]),
            make_session(court_fee=Decimal("50"), shuttle_qty=0, participants=["C"]),
        ]

        summary = summarize(sessions)

        assert summary.session_count == 2
        assert summary.total_cost == Decimal("160")
        assert summary.total_participants == 3
        assert summary.avg_cost_per_session == Decimal("80")

    def test_empty_summary(self):
        summary = summarize([])
        assert summary.session_count == 0
        assert summary.avg_cost_per_session == Decimal(0)


class TestFrequentParticipants:
    def test_sorted_distinct_names(self, make_session):
        sessions = [
            make_session(participants=["Zoe", "Amir"]),
            make_session(participants=["Amir", "Mei"], waiting_list=["Waiting"]),
        ]
        assert frequent_participants(sessions) == ["Amir", "Mei", "Zoe"]
