"""Tests for health check endpoints."""

from fastapi.testclient import TestClient


def test_health_check(client_unauthenticated: TestClient):
    """Test basic health check returns healthy."""
    response = client_unauthenticated.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_readiness_reports_store(client_unauthenticated: TestClient):
    response = client_unauthenticated.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["storage"] == "memory"
    assert data["sync"]["online"] is True
    assert data["sync"]["last_error"] is None
