"""Tests for the app factory: mounting, correlation IDs, error rendering."""

from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from rentaly.api.factory import create_app
from rentaly.domain.errors import ConflictError


class TestMounting:
    def test_health_available(self):
        client = TestClient(create_app())
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_protected_routes_mounted(self):
        client = TestClient(create_app())
        # 401 (not 404): route exists, caller unauthenticated
        assert client.get("/auth/whoami").status_code == 401
        assert client.get("/reservations").status_code == 401
        assert client.get("/admin/reservations").status_code == 401
        assert client.get("/dashboard/revenue").status_code == 401

    def test_unknown_route_is_json_error(self):
        client = TestClient(create_app())
        response = client.get("/conversations")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestCorrelationId:
    def test_generates_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/health")
        assert len(response.headers["X-Correlation-ID"]) == 36  # UUID length

    def test_preserves_incoming_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/health", headers={"X-Correlation-ID": "test-123"})
        assert response.headers["X-Correlation-ID"] == "test-123"

    def test_replaces_unsafe_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/health", headers={"X-Correlation-ID": "bad id\twith spaces"})
        cid = response.headers["X-Correlation-ID"]
        assert cid != "bad id\twith spaces"
        assert len(cid) == 36

    def test_error_responses_carry_correlation_id(self):
        client = TestClient(create_app())
        response = client.get("/conversations", headers={"X-Correlation-ID": "trace-1"})
        assert response.headers["X-Correlation-ID"] == "trace-1"


class TestErrorRendering:
    def test_malformed_uuid_is_400(self):
        client = TestClient(create_app())
        response = client.get("/bookings/not-a-uuid")
        assert response.status_code == 400
        assert "listing_id" in response.json()["error"]

    def test_domain_error_uses_its_status(self):
        with patch(
            "rentaly.api.routes.bookings.get_booked_dates",
            side_effect=ConflictError("Ces dates sont déjà réservées"),
        ):
            client = TestClient(create_app())
            response = client.get(f"/bookings/{uuid4()}")
        assert response.status_code == 400
        assert response.json() == {"error": "Ces dates sont déjà réservées"}

    def test_unexpected_error_is_500(self):
        with patch(
            "rentaly.api.routes.bookings.get_booked_dates",
            side_effect=RuntimeError("connection refused"),
        ):
            client = TestClient(create_app(), raise_server_exceptions=False)
            response = client.get(f"/bookings/{uuid4()}", headers={"X-Correlation-ID": "trace-500"})
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["X-Correlation-ID"] == "trace-500"
