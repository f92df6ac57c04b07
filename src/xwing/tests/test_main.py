"""Tests for application wiring."""

import subprocess
import sys
from pathlib import Path

from fastapi.testclient import TestClient

from src.xwing.auth.dependencies import get_context
from src.xwing.main import app

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def test_app_imports_in_fresh_interpreter() -> None:
    """Importing the entry point first must not trip over package import order."""
    result = subprocess.run(
        [sys.executable, "-c", "import src.xwing.main"],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 0, result.stderr


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_routes_are_registered() -> None:
    paths = set(app.openapi()["paths"])

    assert {
        "/all",
        "/squads/list",
        "/squads/new",
        "/squads/{squad_id}",
        "/ping",
        "/methods",
        "/auth/{provider}",
        "/auth/{provider}/callback",
        "/auth/logout",
        "/auth/failure",
        "/health",
    } <= paths


def test_missing_context_is_a_server_error() -> None:
    app.dependency_overrides.pop(get_context, None)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/methods")

    assert response.status_code == 500
