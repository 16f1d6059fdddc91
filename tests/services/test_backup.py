"""Tests for backup export and import."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from shuttlehub.errors import BackupFormatError, ConfirmationRequiredError, PermissionDeniedError
from shuttlehub.models import LocationConfig
from shuttlehub.services.backup import (
    backup_to_dict,
    dump_backup,
    export_backup,
    parse_backup,
    restore_backup,
)


@pytest.fixture
def populated_store(store, make_session):
    store.create_session(make_session(participants=["Alice", "Bob"], waiting_list=["Cara"]))
    return store


class TestExport:
    """Tests for exporting a backup."""

    def test_document_shape(self, populated_store, now):
        data = backup_to_dict(export_backup(populated_store, now=now))

        assert data["version"] == "1.0"
        assert data["exportDate"] == "2025-03-14T15:00:00"
        assert len(data["locations"]) == 2
        session = data["sessions"][0]
        assert session["waitingList"] == ["Cara"]
        assert session["courtFee"] == 80

    def test_export_then_import_restores_everything(self, populated_store, now, make_session):
        text = dump_backup(export_backup(populated_store, now=now))
        before = populated_store.list_sessions()

        populated_store.create_session(make_session(location="Elsewhere"))
        restore_backup(populated_store, parse_backup(text), is_admin=True, confirmed=True)

        assert populated_store.list_sessions() == before


class TestParse:
    """Tests for validating backup text."""

    def test_invalid_json(self):
        with pytest.raises(BackupFormatError, match="not valid JSON"):
            parse_backup("{not json")

    def test_not_an_object(self):
        with pytest.raises(BackupFormatError, match="JSON object"):
            parse_backup("[]")

    def test_missing_sessions_array(self):
        with pytest.raises(BackupFormatError, match="sessions"):
            parse_backup(json.dumps({"locations": []}))

    def test_invalid_record(self):
        text = json.dumps({"sessions": [{"id": "x", "date": "soon"}], "locations": []})
        with pytest.raises(BackupFormatError, match="invalid record"):
            parse_backup(text)

    def test_duplicate_session_ids(self, populated_store, now):
        data = backup_to_dict(export_backup(populated_store, now=now))
        data["sessions"].append(data["sessions"][0])

        with pytest.raises(BackupFormatError, match="duplicate"):
            parse_backup(json.dumps(data))

    def test_legacy_file_without_version(self):
        text = json.dumps(
            {
                "exportDate": "2025-03-01T10:00:00.000Z",
                "sessions": [],
                "locations": [{"id": "7", "name": "Arena", "defaultCourtFee": 15}],
            }
        )
        backup = parse_backup(text)

        assert backup.version == "1.0"
        assert backup.export_date.year == 2025
        assert backup.locations[0].default_court_fee == Decimal("15")

    def test_long_amounts_are_exact(self):
        text = """{"sessions": [], "locations": [
            {"id": "7", "name": "Arena", "defaultCourtFee": 12.345678901234567890123}
        ]}"""

        backup = parse_backup(text)

        assert backup.locations[0].default_court_fee == Decimal("12.345678901234567890123")


class TestRestore:
    """Tests for the restore guards."""

    @pytest.fixture
    def backup(self, now):
        return parse_backup(
            json.dumps(
                {
                    "version": "1.0",
                    "exportDate": now.isoformat(),
                    "sessions": [],
                    "locations": [{"id": "9", "name": "Arena", "defaultCourtFee": 12}],
                }
            )
        )

    def test_member_cannot_restore(self, populated_store, backup):
        with pytest.raises(PermissionDeniedError):
            restore_backup(populated_store, backup, is_admin=False, confirmed=True)
        assert len(populated_store.list_sessions()) == 1

    def test_requires_confirmation(self, populated_store, backup):
        with pytest.raises(ConfirmationRequiredError):
            restore_backup(populated_store, backup, is_admin=True, confirmed=False)
        assert len(populated_store.list_sessions()) == 1

    def test_replaces_both_collections(self, populated_store, backup):
        restore_backup(populated_store, backup, is_admin=True, confirmed=True)

        assert populated_store.list_sessions() == []
        assert populated_store.list_locations() == [
            LocationConfig(id="9", name="Arena", default_court_fee=Decimal("12"))
        ]

    def test_export_date_defaults_to_now(self):
        backup = parse_backup(json.dumps({"sessions": [], "locations": []}))
        assert isinstance(backup.export_date, datetime)
