"""Tests for the analytics endpoints."""

from fastapi.testclient import TestClient


class TestAnalytics:
    """Tests for GET /api/v1/analytics."""

    def test_summary_and_periods(self, client_as_user: TestClient, created_session: dict):
        session_id = created_session["id"]
        client_as_user.post(f"/api/v1/sessions/{session_id}/participants", json={"name": "A"})

        response = client_as_user.get("/api/v1/analytics", params={"period": "year"})

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "year"
        assert data["summary"]["session_count"] == 1
        assert [p["key"] for p in data["periods"]] == ["2025"]
        assert data["sessions"][0]["session_id"] == session_id

    def test_frequent_participants(self, client_as_user: TestClient, created_session: dict):
        session_id = created_session["id"]
        for name in ("Bob", "Alice"):
            client_as_user.post(f"/api/v1/sessions/{session_id}/participants", json={"name": name})

        response = client_as_user.get("/api/v1/participants/frequent")

        assert response.status_code == 200
        assert sorted(response.json()) == ["Alice", "Bob"]

    def test_requires_login(self, client_unauthenticated: TestClient):
        assert client_unauthenticated.get("/api/v1/analytics").status_code == 401
