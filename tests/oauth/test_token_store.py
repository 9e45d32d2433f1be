"""Tests for the in-memory token store."""

from datetime import datetime, timedelta, timezone

import pytest

from linkedin_client.exceptions import ExpiredTokenError, NoSavedTokenError, TokenValidationError
from linkedin_client.oauth.token_store import TokenPair, TokenStore
from linkedin_client.oauth.validations import (
    AccessToken,
    AccessTokenResponse,
    RefreshToken,
    make_access_token,
    make_refresh_token,
)

ISSUED = datetime(2026, 1, 25, 10, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(ISSUED)


@pytest.fixture
def store(clock):
    return TokenStore(clock=clock)


def make_response(**overrides) -> AccessTokenResponse:
    data = {
        "access_token": "access_123",
        "expires_in": 3600,
        "refresh_token": "refresh_456",
        "refresh_token_expires_in": 86400,
    }
    data.update(overrides)
    return AccessTokenResponse.model_validate({k: v for k, v in data.items() if v is not None})


class TestTokenValueTypes:
    """Tests for AccessToken / RefreshToken factories."""

    def test_make_access_token_wraps_string(self):
        """make_access_token returns an AccessToken rendering as the raw value."""
        token = make_access_token("abc")

        assert isinstance(token, AccessToken)
        assert str(token) == "abc"
        assert "abc" not in repr(token)

    def test_make_access_token_is_idempotent(self):
        """An AccessToken passes through unchanged."""
        token = make_access_token("abc")

        assert make_access_token(token) is token

    @pytest.mark.parametrize("raw", ["", None, 123])
    def test_make_tokens_reject_invalid_values(self, raw):
        """Empty or non-string tokens are rejected."""
        with pytest.raises(TokenValidationError):
            make_access_token(raw)
        with pytest.raises(TokenValidationError):
            make_refresh_token(raw)

    def test_refresh_and_access_tokens_are_distinct_types(self):
        """A refresh token is never equal to an access token of the same value."""
        assert isinstance(make_refresh_token("x"), RefreshToken)
        assert make_refresh_token("x") != make_access_token("x")


class TestTokenPair:
    """Tests for TokenPair."""

    def test_from_response_converts_lifetimes_once(self):
        """Relative lifetimes become absolute timestamps."""
        pair = TokenPair.from_response(make_response(), ISSUED)

        assert pair.access_expires_at == ISSUED + timedelta(seconds=3600)
        assert pair.refresh_expires_at == ISSUED + timedelta(seconds=86400)

    def test_refresh_expiry_uses_refresh_lifetime(self):
        """Refresh expiry comes from refresh_token_expires_in, not expires_in."""
        pair = TokenPair.from_response(
            make_response(expires_in=60, refresh_token_expires_in=600), ISSUED
        )

        assert pair.refresh_expires_at - ISSUED == timedelta(seconds=600)

    def test_refresh_token_without_lifetime_is_dropped(self):
        """Refresh fields are both present or both absent."""
        pair = TokenPair.from_response(make_response(refresh_token_expires_in=None), ISSUED)

        assert pair.refresh_token is None
        assert pair.refresh_expires_at is None

    def test_half_refresh_pair_rejected(self):
        """Constructing a pair with only one refresh field fails."""
        with pytest.raises(ValueError):
            TokenPair(
                access_token=make_access_token("a"),
                access_expires_at=ISSUED,
                refresh_token=make_refresh_token("r"),
            )


class TestTokenStore:
    """Tests for TokenStore."""

    def test_empty_store_raises_no_saved_token(self, store):
        """Reading before any set raises NoSavedTokenError."""
        with pytest.raises(NoSavedTokenError) as exc_info:
            store.get_access_token()
        assert exc_info.value.code == "NO_SAVED_ACCESS_TOKEN"

        with pytest.raises(NoSavedTokenError) as exc_info:
            store.get_refresh_token()
        assert exc_info.value.code == "NO_SAVED_REFRESH_TOKEN"

    def test_valid_access_token_returned(self, store, clock):
        """Access token is returned while now < expiry."""
        store.set_tokens(make_response())
        clock.now = ISSUED + timedelta(seconds=3599)

        assert str(store.get_access_token()) == "access_123"

    def test_access_token_expired_at_exact_expiry(self, store, clock):
        """At exactly the expiry instant the token is expired."""
        store.set_tokens(make_response())
        clock.now = ISSUED + timedelta(seconds=3600)

        with pytest.raises(ExpiredTokenError) as exc_info:
            store.get_access_token()
        assert exc_info.value.code == "EXPIRED_ACCESS_TOKEN"

    def test_refresh_token_expiry(self, store, clock):
        """Refresh token follows the same boundary rule."""
        store.set_tokens(make_response())
        clock.now = ISSUED + timedelta(seconds=86399)
        assert str(store.get_refresh_token()) == "refresh_456"

        clock.now = ISSUED + timedelta(seconds=86400)
        with pytest.raises(ExpiredTokenError):
            store.get_refresh_token()

    def test_access_expired_but_refresh_valid(self, store, clock):
        """Expired access token does not affect the refresh token."""
        store.set_tokens(make_response())
        clock.now = ISSUED + timedelta(hours=2)

        with pytest.raises(ExpiredTokenError):
            store.get_access_token()
        assert str(store.get_refresh_token()) == "refresh_456"

    def test_set_tokens_replaces_whole_pair(self, store):
        """A new response without refresh token clears the old refresh token."""
        store.set_tokens(make_response())
        store.set_tokens(make_response(access_token="second", refresh_token=None))

        assert str(store.get_access_token()) == "second"
        with pytest.raises(NoSavedTokenError):
            store.get_refresh_token()

    def test_clear_tokens(self, store):
        """clear_tokens resets the store to empty."""
        store.set_tokens(make_response())
        store.clear_tokens()

        assert store.pair is None
        with pytest.raises(NoSavedTokenError):
            store.get_access_token()

    def test_expiration_accessors(self, store):
        """Expiration properties expose absolute timestamps."""
        with pytest.raises(NoSavedTokenError):
            store.access_token_expiration

        store.set_tokens(make_response())

        assert store.access_token_expiration == ISSUED + timedelta(seconds=3600)
        assert store.refresh_token_expiration == ISSUED + timedelta(seconds=86400)

    def test_get_status(self, store, clock):
        """get_status reports expiry without token values."""
        assert store.get_status() == {"authorized": False, "message": "No tokens stored"}

        store.set_tokens(make_response())
        clock.now = ISSUED + timedelta(hours=2)
        status = store.get_status()

        assert status["authorized"] is True
        assert status["access_expired"] is True
        assert status["refresh_expired"] is False
        assert "access_123" not in str(status)
