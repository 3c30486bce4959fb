# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides a controllable clock for the rate limiter
# - Builds isolated app instances with a TestClient
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from lib.rate_limiter import RateLimiter


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """A fresh fake clock."""
    return FakeClock()


@pytest.fixture
def test_settings():
    """Settings with a single allowed origin."""
    return Settings(
        SUPABASE_URL="https://test-project.supabase.co",
        SUPABASE_SERVICE_KEY="test-service-key",
        CORS_ORIGINS="http://localhost:3000, https://buckets.media",
    )


@pytest.fixture
def make_client(test_settings, clock):
    """
    Factory building a TestClient around a fresh app.

    The lifespan is not entered, so no live sweep timer runs.
    """
    def _make(max_requests: int = 100, window_seconds: float = 900.0, settings=None):
        limiter = RateLimiter(
            max_requests=max_requests,
            window_seconds=window_seconds,
            clock=clock,
        )
        app = create_app(settings=settings or test_settings, rate_limiter=limiter)
        return app, TestClient(app)

    return _make


@pytest.fixture
def mock_supabase():
    """Patch the shared and per-session Supabase clients with one MagicMock."""
    client = MagicMock()
    client.auth.admin.create_user.return_value.user.id = "550e8400-e29b-41d4-a716-446655440000"
    client.auth.admin.create_user.return_value.user.model_dump.return_value = {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "email": "jamie@example.com",
    }
    client.table.return_value.insert.return_value.execute.return_value.data = [{"id": "row-1"}]

    session = {"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600}
    client.auth.sign_in_with_password.return_value.user.model_dump.return_value = {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "email": "jamie@example.com",
    }
    client.auth.sign_in_with_password.return_value.session.model_dump.return_value = session
    client.auth.refresh_session.return_value.session.model_dump.return_value = session

    with patch("lib.supabase_client.SupabaseClient.get_client", return_value=client), \
            patch("lib.supabase_client.SupabaseClient.create_session_client", return_value=client):
        yield client
