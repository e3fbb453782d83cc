"""Tests for API routes.

These tests exercise the HTTP surface with the sync service replaced.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from ctrader_relay.application.sync_service import SyncService
from ctrader_relay.domain.models import ServiceConfiguration
from ctrader_relay.infrastructure.api.dependencies import (
    get_service_configuration,
    get_sync_service,
)
from ctrader_relay.main import app

SECRET = "relay-secret-value"


@pytest.fixture
def mock_sync_service() -> Mock:
    """Create a mock sync service."""
    service = Mock(spec=SyncService)
    service.sync = AsyncMock(
        return_value={
            "ok": True,
            "deals": [],
            "symbols": {7: "EURUSD"},
            "lotSizes": {7: 100000},
            "pages": 0,
            "total": 0,
        }
    )
    return service


@pytest.fixture
def config() -> ServiceConfiguration:
    return ServiceConfiguration(relay_secret=SECRET, max_body_bytes=1024)


@pytest.fixture
def client(config, mock_sync_service) -> Iterator[TestClient]:
    """Create a test client with overridden dependencies."""
    app.dependency_overrides[get_service_configuration] = lambda: config
    app.dependency_overrides[get_sync_service] = lambda: mock_sync_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    """Test cases for the liveness endpoint."""

    def test_health_without_secret(self, client):
        """Test that health is not gated."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "service": "ctrader-relay"}


class TestSyncRoute:
    """Test cases for POST /sync."""

    def test_header_secret(self, client, mock_sync_service, sync_body):
        """Test a request authorised by header."""
        response = client.post("/sync", json=sync_body, headers={"X-Relay-Secret": SECRET})

        assert response.status_code == 200
        assert response.json()["symbols"] == {"7": "EURUSD"}
        assert response.json()["lotSizes"] == {"7": 100000}
        mock_sync_service.sync.assert_awaited_once_with(sync_body)

    def test_body_secret(self, client, mock_sync_service, sync_body):
        """Test a request authorised by the body field."""
        response = client.post("/sync", json={**sync_body, "secret": SECRET})

        assert response.status_code == 200
        assert response.json()["ok"] is True

    def test_missing_secret(self, client, mock_sync_service, sync_body):
        """Test that an anonymous request is rejected."""
        response = client.post("/sync", json=sync_body)

        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Unauthorized"}
        mock_sync_service.sync.assert_not_called()

    def test_wrong_secret(self, client, mock_sync_service, sync_body):
        """Test that a wrong secret is rejected."""
        response = client.post("/sync", json=sync_body, headers={"X-Relay-Secret": "nope"})

        assert response.status_code == 401
        mock_sync_service.sync.assert_not_called()

    def test_header_wins_over_body(self, client, sync_body):
        """Test that a wrong header is not rescued by a correct body secret."""
        response = client.post(
            "/sync", json={**sync_body, "secret": SECRET}, headers={"X-Relay-Secret": "nope"}
        )

        assert response.status_code == 401

    def test_empty_header_falls_back_to_body(self, client, mock_sync_service, sync_body):
        """Test that a blank header does not hide the body secret."""
        response = client.post(
            "/sync", json={**sync_body, "secret": SECRET}, headers={"X-Relay-Secret": ""}
        )

        assert response.status_code == 200
        mock_sync_service.sync.assert_awaited_once()

    def test_empty_header_and_body_secret(self, client, mock_sync_service, sync_body):
        """Test that blank secrets everywhere are rejected."""
        response = client.post(
            "/sync", json={**sync_body, "secret": ""}, headers={"X-Relay-Secret": ""}
        )

        assert response.status_code == 401
        mock_sync_service.sync.assert_not_called()

    def test_unset_secret_rejects_everything(self, client, config, sync_body):
        """Test that an unprotected relay refuses every sync."""
        app.dependency_overrides[get_service_configuration] = lambda: ServiceConfiguration()

        response = client.post("/sync", json={**sync_body, "secret": ""})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_body_too_large(self, client, mock_sync_service, sync_body):
        """Test that oversized bodies are refused before parsing."""
        body = {**sync_body, "padding": "x" * 2048}

        response = client.post("/sync", json=body, headers={"X-Relay-Secret": SECRET})

        assert response.status_code == 413
        assert response.json() == {"ok": False, "error": "Request body exceeds 1024 bytes"}
        mock_sync_service.sync.assert_not_called()

    def test_failure_envelope_passes_through(self, client, mock_sync_service, sync_body):
        """Test that sync failures are still answered with 200."""
        mock_sync_service.sync.return_value = {"ok": False, "error": "Missing fields: host"}

        response = client.post("/sync", json=sync_body, headers={"X-Relay-Secret": SECRET})

        assert response.status_code == 200
        assert response.json() == {"ok": False, "error": "Missing fields: host"}

    def test_empty_body(self, client, mock_sync_service):
        """Test that a missing body reaches the service as an empty request."""
        client.post("/sync", headers={"X-Relay-Secret": SECRET})

        mock_sync_service.sync.assert_awaited_once_with({})

    def test_non_object_body(self, client, mock_sync_service):
        """Test that a JSON array is a validation error."""
        response = client.post("/sync", json=[1, 2], headers={"X-Relay-Secret": SECRET})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        mock_sync_service.sync.assert_not_called()

    def test_unknown_route(self, client):
        """Test the envelope of a 404."""
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json()["ok"] is False
