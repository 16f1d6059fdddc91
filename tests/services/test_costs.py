"""Tests for cost calculation."""

from decimal import Decimal

import pytest

from shuttlehub.services.costs import (
    cost_per_person,
    duration_hours,
    format_currency,
    round_currency,
    session_duration,
    total_court_fee,
    total_event_cost,
    total_shuttle_cost,
)


class TestDuration:
    """Tests for duration_hours."""

    def test_two_hours(self):
        """19:00 to 21:00 is two hours."""
        assert duration_hours("19:00", "21:00") == Decimal(2)

    def test_fractional_hours(self):
        """Half hours are kept exactly."""
        assert duration_hours("19:00", "21:30") == Decimal("2.5")

    def test_zero_duration(self):
        """Same start and end gives zero."""
        assert duration_hours("19:00", "19:00") == Decimal(0)

    def test_end_before_start_is_zero(self):
        """A range that runs backwards cannot be priced."""
        assert duration_hours("21:00", "19:00") == Decimal(0)

    def test_midnight_end(self):
        """24:00 is accepted as the end of the day."""
        assert duration_hours("22:00", "24:00") == Decimal(2)

    @pytest.mark.parametrize("start,end", [("7pm", "21:00"), ("19:00", "25:00"), ("19:60", "21:00")])
    def test_malformed_time_raises(self, start, end):
        """Invalid clock strings raise ValueError."""
        with pytest.raises(ValueError):
            duration_hours(start, end)

    def test_session_duration(self, make_session):
        """Duration is read from the stored range."""
        assert session_duration(make_session(time="20:00 - 23:00")) == Decimal(3)


class TestTotals:
    """Tests for court, shuttle and event totals."""

    def test_total_court_fee(self):
        """Rate x courts x hours."""
        assert total_court_fee(Decimal("20"), 2, Decimal("2.5")) == Decimal("100")

    def test_total_shuttle_cost(self):
        assert total_shuttle_cost(3, Decimal("10.58")) == Decimal("31.74")

    def test_event_cost_and_share(self, make_session):
        """Court fee 100, 3 shuttles at 10, two players -> 130 total, 65 each."""
        session = make_session(
            court_fee=Decimal("100"),
            shuttle_qty=3,
            shuttle_price=Decimal("10"),
            participants=["A", "B"],
        )
        assert total_event_cost(session) == Decimal("130")
        assert cost_per_person(session) == Decimal("65")
        assert format_currency(cost_per_person(session)) == "RM 65.00"

    def test_share_with_no_participants_is_full_total(self, make_session):
        """With nobody signed up the whole cost is reported."""
        session = make_session(court_fee=Decimal("100"), shuttle_qty=0, participants=[])
        assert cost_per_person(session) == Decimal("100")

    def test_costs_are_deterministic(self, make_session):
        """Recomputing from the same inputs gives the same result."""
        session = make_session(participants=["A", "B", "C"])
        assert cost_per_person(session) == cost_per_person(session.model_copy())
        assert total_event_cost(session) == total_event_cost(session.model_copy())

    def test_share_is_not_rounded_internally(self, make_session):
        """Thirds stay exact until display."""
        session = make_session(court_fee=Decimal("100"), shuttle_qty=0, participants=["A", "B", "C"])
        share = cost_per_person(session)
        assert share * 3 == pytest.approx(Decimal("100"))
        assert round_currency(share) == Decimal("33.33")


class TestFormatting:
    """Tests for display rounding."""

    def test_round_half_up(self):
        assert round_currency(Decimal("2.345")) == Decimal("2.35")

    def test_format_with_currency(self):
        assert format_currency(Decimal("1234.5"), "MYR") == "MYR 1,234.50"
