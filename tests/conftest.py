"""Pytest fixtures shared by the LinkedIn client tests.

This module provides a ready configuration, an isolated nonce registry
and a sleep replacement that records requested delays instead of
waiting.
"""

from typing import Generator, List

import pytest

from linkedin_client.config import LinkedinClientConfig
from linkedin_client.oauth.session import NonceRegistry


class RecordingSleep:
    """Async stand-in for asyncio.sleep that records each delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def config() -> LinkedinClientConfig:
    """Create test client config."""
    return LinkedinClientConfig(
        client_id="test_client_id",
        client_secret="test_client_secret",
        oauth_callback_url="https://example.com/oauth/callback",
    )


@pytest.fixture
def registry() -> Generator[NonceRegistry, None, None]:
    """Create a nonce registry isolated from the process-wide one."""
    with NonceRegistry() as nonce_registry:
        yield nonce_registry


@pytest.fixture
def recorded_sleep() -> RecordingSleep:
    """Sleep replacement recording delays in seconds."""
    return RecordingSleep()


@pytest.fixture
def token_response() -> dict:
    """Token endpoint body with a refresh token."""
    return {
        "access_token": "new_access_token",
        "expires_in": 5184000,
        "refresh_token": "new_refresh_token",
        "refresh_token_expires_in": 31536000,
        "scope": "r_basicprofile,w_member_social",
    }
