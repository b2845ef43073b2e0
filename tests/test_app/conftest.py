"""Shared fixtures for API endpoint tests."""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Force mock data and a throwaway reports dir before any app imports
os.environ["USE_MOCK_DATA"] = "true"
os.environ["REPORTS_DIR"] = tempfile.mkdtemp(prefix="weekly-reports-")

from src.app.config import AppConfig  # noqa: E402
from src.app.dependencies import get_config  # noqa: E402
from src.app.main import create_app  # noqa: E402


@pytest.fixture(scope="session")
def app():
    """Create a FastAPI app instance with mock data enabled."""
    return create_app()


@pytest.fixture(scope="session")
def client(app):
    """Provide a TestClient for the mock-data app."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_config(app, tmp_path):
    """Point the app at a per-test reports directory."""
    config = AppConfig(
        use_mock_data=True,
        email_recipient="exec@example.com",
        reports_dir=tmp_path,
    )
    app.dependency_overrides[get_config] = lambda: config
    yield config
    app.dependency_overrides.pop(get_config, None)
