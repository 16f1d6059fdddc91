"""Tests for the backup endpoints."""

from fastapi.testclient import TestClient


class TestBackup:
    """Tests for backup export and import."""

    def test_export_import_round_trip(self, client_as_admin: TestClient, created_session: dict):
        exported = client_as_admin.get("/api/v1/backup").json()
        assert exported["exportDate"] == "2025-03-14T15:00:00"
        assert exported["sessions"][0]["courtFee"] == 80

        client_as_admin.delete(f"/api/v1/sessions/{created_session['id']}")
        response = client_as_admin.post(
            "/api/v1/backup", params={"confirm": "true"}, json=exported
        )

        assert response.status_code == 200
        assert response.json()["sessions"] == 1
        ids = [s["id"] for s in client_as_admin.get("/api/v1/sessions").json()]
        assert ids == [created_session["id"]]

    def test_import_needs_confirmation(self, client_as_admin: TestClient):
        response = client_as_admin.post("/api/v1/backup", json={"sessions": [], "locations": []})
        assert response.status_code == 400

    def test_import_rejects_bad_document(self, client_as_admin: TestClient):
        response = client_as_admin.post(
            "/api/v1/backup", params={"confirm": "true"}, json={"sessions": []}
        )

        assert response.status_code == 400
        assert "locations" in response.json()["detail"]

    def test_member_cannot_export(self, client_as_user: TestClient):
        assert client_as_user.get("/api/v1/backup").status_code == 403
