"""Tests for the stored document format."""

from datetime import date
from decimal import Decimal

import pytest

from shuttlehub.dao.documents import (
    location_from_document,
    location_to_document,
    session_from_document,
    session_to_document,
)
from shuttlehub.models import SessionStatus


class TestSessionDocuments:
    """Tests for session documents."""

    def test_camel_case_keys(self, make_session):
        doc = session_to_document(make_session(participants=["A"], shuttle_price=Decimal("10.58")))

        assert doc["courtCount"] == 2
        assert doc["courtFee"] == 80
        assert doc["shuttlePrice"] == 10.58
        assert doc["waitingList"] == []
        assert doc["maxParticipants"] == 8
        assert doc["date"] == "2025-03-14"
        assert doc["status"] == "active"
        assert "participant_count" not in doc
        assert "participantCount" not in doc

    def test_legacy_document_defaults(self):
        """Old documents without optional keys load with defaults."""
        session = session_from_document(
            {
                "id": "abc",
                "date": "2024-11-02T00:00:00.000Z",
                "time": "20:00 - 22:00",
                "location": "SRC",
                "courtFee": 80,
                "shuttleQty": 2,
                "shuttlePrice": 10.58,
                "participants": ["A"],
                "maxParticipants": 0,
            }
        )

        assert session.date == date(2024, 11, 2)
        assert session.court_count == 1
        assert session.max_participants == 8
        assert session.shuttle_price == Decimal("10.58")
        assert session.waiting_list == []
        assert session.status == SessionStatus.ACTIVE

    def test_repairs_roster_on_load(self):
        """Duplicates collapse, and waiting or requested names must be consistent."""
        session = session_from_document(
            {
                "id": "abc",
                "date": "2025-03-14",
                "time": "19:00 - 21:00",
                "location": "SRC",
                "participants": ["A", "B", "A"],
                "waitingList": ["B", "C", "C"],
                "deletionRequests": ["Z", "A"],
            }
        )

        assert session.participants == ["A", "B"]
        assert session.waiting_list == ["C"]
        assert session.deletion_requests == ["A"]

    def test_over_capacity_is_kept(self):
        session = session_from_document(
            {
                "id": "abc",
                "date": "2025-03-14",
                "time": "19:00 - 21:00",
                "location": "SRC",
                "participants": ["A", "B", "C"],
                "maxParticipants": 2,
            }
        )
        assert session.participants == ["A", "B", "C"]
        assert session.is_over_capacity

    def test_missing_required_key(self):
        with pytest.raises(ValueError, match="time"):
            session_from_document({"id": "abc", "date": "2025-03-14", "location": "SRC"})

    def test_invalid_amount(self):
        with pytest.raises(ValueError):
            session_from_document(
                {
                    "id": "abc",
                    "date": "2025-03-14",
                    "time": "19:00 - 21:00",
                    "location": "SRC",
                    "courtFee": "lots",
                }
            )

    def test_round_trip(self, make_session):
        session = make_session(participants=["A", "B"], waiting_list=["C"], deletion_requests=["B"])
        assert session_from_document(session_to_document(session)) == session

    def test_amounts_are_written_without_loss(self, make_session):
        fee = Decimal(20) * Decimal(5) / Decimal(3)
        doc = session_to_document(make_session(court_fee=fee, shuttle_price=Decimal("10.58")))

        assert doc["courtFee"] == str(fee)
        assert doc["shuttlePrice"] == 10.58
        assert session_from_document(doc).court_fee == fee


class TestLocationDocuments:
    def test_round_trip(self):
        location = location_from_document({"id": "9", "name": "Arena", "defaultCourtFee": 25})
        assert location.default_court_fee == Decimal("25")
        assert location_to_document(location) == {"id": "9", "name": "Arena", "defaultCourtFee": 25}

    def test_missing_id_gets_one(self):
        location = location_from_document({"name": "Arena", "defaultCourtFee": "25.5"})
        assert location.id
        assert location.default_court_fee == Decimal("25.5")
