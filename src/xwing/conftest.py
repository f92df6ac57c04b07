"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from src.xwing.auth.dependencies import get_context
from src.xwing.config import Settings
from src.xwing.context import AppContext, build_context
from src.xwing.main import app
from src.xwing.services.database import User
from src.xwing.services.rate_limiter import limiter
from src.xwing.tests.fakes import FakeSupabaseClient


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        session_secret="test-session-secret",
        google_key="google-client-id",
        google_secret="google-client-secret",
        facebook_key=None,
        facebook_secret=None,
        oauth_redirect_base_url="http://testserver",
        posthog_api_key=None,
    )


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    """Empty in-memory store."""
    return FakeSupabaseClient()


@pytest.fixture
def context(test_settings: Settings, fake_supabase: FakeSupabaseClient) -> AppContext:
    """Application context wired to the in-memory store."""
    return build_context(test_settings, client=fake_supabase)


@pytest.fixture
def alice(context: AppContext) -> User:
    return context.identity_store.get_or_create("google_oauth2", "alice-1", {"name": "Alice"})


@pytest.fixture
def bob(context: AppContext) -> User:
    return context.identity_store.get_or_create("facebook", "bob-2", {"name": "Bob"})


@pytest.fixture
def client(context: AppContext):
    """
    Provide FastAPI test client for API testing, without a session.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    app.dependency_overrides[get_context] = lambda: context
    limiter_enabled = limiter.enabled
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = limiter_enabled


@pytest.fixture
def client_for(client: TestClient, context: AppContext) -> Callable[[User], TestClient]:
    """Factory for test clients carrying a session cookie for the given user."""

    def _client_for(user: User) -> TestClient:
        session_client = TestClient(app)
        session_client.cookies.set(
            context.settings.session_cookie_name, context.session_codec.issue(user.id)
        )
        return session_client

    return _client_for
