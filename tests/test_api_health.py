"""Tests for the health check API endpoint."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def test_client():
    """Create a test client without lifespan (to avoid opening the database)."""
    from fastapi import FastAPI
    from recordsmith.api.routes import router

    app = FastAPI()
    app.include_router(router, prefix="/api")

    return TestClient(app)


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_ok_status(self, test_client):
        """Test that health check returns status 'ok'."""
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "recordsmith"

    @patch("recordsmith.config.settings")
    def test_health_check_reports_config(self, mock_settings, test_client):
        """Test that health check reports the import configuration."""
        mock_settings.database_path = "data/test.db"
        mock_settings.default_dedup = "__none__"
        mock_settings.max_csv_bytes = 1024

        response = test_client.get("/api/health")

        config = response.json()["config"]
        assert config["database_path"] == "data/test.db"
        assert config["default_dedup"] == "__none__"
        assert config["max_csv_bytes"] == 1024


class TestCreateApp:
    """Test the application factory."""

    def test_create_app_mounts_routes(self):
        """Test the factory registers the API router."""
        from recordsmith.api import create_app

        app = create_app()
        paths = {route.path for route in app.routes}

        assert "/api/health" in paths
        assert "/api/imports" in paths
        assert "/api/imports/preview" in paths
