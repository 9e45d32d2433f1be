"""
In-memory token store for the LinkedIn client.

Holds the current access/refresh token pair with absolute expiration
timestamps. The store never persists tokens and never refreshes on read:
an expired token is reported so the caller can decide what to do.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..exceptions import ExpiredTokenError, NoSavedTokenError
from .validations import (
    AccessToken,
    AccessTokenResponse,
    RefreshToken,
    make_access_token,
    make_refresh_token,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenPair:
    """
    Access token with an optional refresh token.

    Attributes:
        access_token: Validated access token
        access_expires_at: When the access token expires (UTC)
        refresh_token: Validated refresh token, if granted
        refresh_expires_at: When the refresh token expires (UTC), if granted
    """

    access_token: AccessToken
    access_expires_at: datetime
    refresh_token: Optional[RefreshToken] = None
    refresh_expires_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if (self.refresh_token is None) != (self.refresh_expires_at is None):
            raise ValueError("refresh_token and refresh_expires_at must be set together")

    @classmethod
    def from_response(cls, response: AccessTokenResponse, now: datetime) -> "TokenPair":
        """
        Build a pair from a token endpoint response.

        Relative lifetimes are converted to absolute timestamps here, once.
        A refresh token without its lifetime (or vice versa) is dropped.
        """
        refresh_token = None
        refresh_expires_at = None
        if response.has_refresh_token:
            refresh_token = make_refresh_token(response.refresh_token)
            refresh_expires_at = now + timedelta(seconds=response.refresh_token_expires_in)

        return cls(
            access_token=make_access_token(response.access_token),
            access_expires_at=now + timedelta(seconds=response.expires_in),
            refresh_token=refresh_token,
            refresh_expires_at=refresh_expires_at,
        )


class TokenStore:
    """
    Current token pair of one authenticated client.

    The pair is replaced wholesale under a lock; readers take a snapshot
    of the reference and never see a half-updated pair.
    """

    def __init__(self, clock: Clock = utc_now, logger: Optional[logging.Logger] = None):
        """
        Initialize an empty store.

        Args:
            clock: Returns the current timezone-aware time (injectable for tests)
            logger: Logger for store events (module logger if not provided)
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._pair: Optional[TokenPair] = None
        self.logger = logger or logging.getLogger(__name__)

    @property
    def pair(self) -> Optional[TokenPair]:
        return self._pair

    def now(self) -> datetime:
        return self._clock()

    def set_tokens(self, tokens: AccessTokenResponse) -> TokenPair:
        """
        Replace the stored pair with the tokens of an endpoint response.

        Args:
            tokens: Validated token endpoint response

        Returns:
            The new TokenPair
        """
        pair = TokenPair.from_response(tokens, self._clock())
        self.set_pair(pair)
        return pair

    def set_pair(self, pair: TokenPair) -> None:
        with self._lock:
            self._pair = pair
        self.logger.debug(
            f"Stored tokens (access expires {pair.access_expires_at.isoformat()}, "
            f"refresh token {'present' if pair.refresh_token else 'absent'})"
        )

    def clear_tokens(self) -> None:
        with self._lock:
            self._pair = None

    def _is_expired(self, expires_at: datetime) -> bool:
        return self._clock() >= expires_at

    def get_access_token(self) -> AccessToken:
        """
        Current access token.

        Raises:
            NoSavedTokenError: If no token was ever set (or tokens were cleared)
            ExpiredTokenError: If now >= access expiration
        """
        pair = self._pair
        if pair is None:
            raise NoSavedTokenError("access")
        if self._is_expired(pair.access_expires_at):
            raise ExpiredTokenError("access")
        return pair.access_token

    def get_refresh_token(self) -> RefreshToken:
        """
        Current refresh token.

        Raises:
            NoSavedTokenError: If no refresh token is stored
            ExpiredTokenError: If now >= refresh expiration
        """
        pair = self._pair
        if pair is None or pair.refresh_token is None:
            raise NoSavedTokenError("refresh")
        if self._is_expired(pair.refresh_expires_at):
            raise ExpiredTokenError("refresh")
        return pair.refresh_token

    @property
    def access_token_expiration(self) -> datetime:
        pair = self._pair
        if pair is None:
            raise NoSavedTokenError("access")
        return pair.access_expires_at

    @property
    def refresh_token_expiration(self) -> datetime:
        pair = self._pair
        if pair is None or pair.refresh_expires_at is None:
            raise NoSavedTokenError("refresh")
        return pair.refresh_expires_at

    def get_status(self) -> dict:
        """
        Token status for diagnostics (never includes token values).

        Returns:
            Dictionary with authorized flag, expiry timestamps and whether
            each token is currently expired
        """
        pair = self._pair
        if pair is None:
            return {"authorized": False, "message": "No tokens stored"}

        status = {
            "authorized": True,
            "access_expired": self._is_expired(pair.access_expires_at),
            "access_expires_at": pair.access_expires_at.isoformat(),
            "has_refresh_token": pair.refresh_token is not None,
        }
        if pair.refresh_expires_at is not None:
            status["refresh_expired"] = self._is_expired(pair.refresh_expires_at)
            status["refresh_expires_at"] = pair.refresh_expires_at.isoformat()
        return status
