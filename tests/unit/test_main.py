"""Tests for the application wiring and lifespan."""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from countdown.core.config import settings
from countdown.main import app


@pytest.fixture
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the app at a temporary database with sync disabled."""
    db_path = tmp_path / "countdown.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))
    monkeypatch.setattr(settings, "sync_provider", "none")
    return db_path


@pytest.mark.unit
def test_health_endpoint_returns_healthy() -> None:
    """Test that health endpoint returns healthy status."""
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.unit
def test_lifespan_loads_state_and_persists_changes(isolated_settings: Path) -> None:
    """Test that state written in one run is loaded by the next."""
    with patch("countdown.main.configure_logfire"), TestClient(app) as client:
        assert client.get("/api/state").status_code == 200
        client.put("/api/target-date", json={"targetDate": "2099-01-02"})
        client.post("/api/tasks", json={"text": "Ship it"})

    assert isolated_settings.exists()

    with patch("countdown.main.configure_logfire"), TestClient(app) as client:
        state = client.get("/api/state").json()

    assert state["targetDate"] == "2099-01-02T00:00:00"
    assert [task["text"] for task in state["tasks"]] == ["Ship it"]
    assert state["sync"]["state"] == "idle"


@pytest.mark.unit
def test_lifespan_with_missing_credentials_runs_local_only(
    isolated_settings: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that a misconfigured provider does not stop the app."""
    monkeypatch.setattr(settings, "sync_provider", "gist")
    monkeypatch.setattr(settings, "github_token", None)

    with patch("countdown.main.configure_logfire"), TestClient(app) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert "Sync:" not in response.text
