"""Shared fixtures for authentication tests."""

import pytest

from src.xwing.auth.session import SessionCodec


@pytest.fixture
def codec() -> SessionCodec:
    """Session codec with a fixed test secret."""
    return SessionCodec(secret="unit-test-secret", max_age_seconds=3600, state_max_age_seconds=60)
