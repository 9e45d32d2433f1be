"""
OAuth login session management.

Builds LinkedIn authorization URLs and tracks the anti-CSRF ``state``
nonce of every login attempt still in flight. A nonce is accepted once:
it leaves the registry on successful consumption or when its TTL runs
out, whichever comes first.

By default every session manager shares one process-wide registry, so a
nonce issued by one client instance can be consumed by another. Pass an
explicit NonceRegistry to isolate clients from each other.
"""

import asyncio
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import quote, urlencode

from ..config import LinkedinClientConfig
from ..constants import LOGIN_URL
from ..exceptions import InvalidStateError

logger = logging.getLogger(__name__)

NONCE_BYTES = 32


def generate_nonce() -> str:
    """32 random bytes, URL-safe base64 encoded."""
    return secrets.token_urlsafe(NONCE_BYTES)


@dataclass
class _PendingNonce:
    created_at: float
    expires_at: float
    timer: Optional[asyncio.TimerHandle] = None
    loop: Optional[asyncio.AbstractEventLoop] = None

    def cancel_timer(self) -> None:
        """Cancel the scheduled removal from whichever thread is calling."""
        timer, loop = self.timer, self.loop
        self.timer = None
        self.loop = None
        if timer is None or loop is None or loop.is_closed():
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            timer.cancel()
            return

        try:
            loop.call_soon_threadsafe(timer.cancel)
        except RuntimeError:
            # Loop closed between the check and the call; the timer can no longer fire.
            pass


class NonceRegistry:
    """
    Set of outstanding login nonces with per-entry expiry.

    When a nonce is added from inside a running event loop its removal is
    scheduled with ``loop.call_later``; the scheduled removal never blocks
    the caller. Expired entries are also evicted on every add, consume,
    discard and size check, so nonces issued without an event loop, or
    from a loop that closed before its timer fired, do not pile up.

    The pending map is guarded by a lock. Timers are cancelled on their
    own loop (directly when called from it, through
    ``call_soon_threadsafe`` otherwise), so the registry may be shared
    between threads.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize an empty registry.

        Args:
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: Dict[str, _PendingNonce] = {}

    def __len__(self) -> int:
        """Number of unexpired pending nonces."""
        with self._lock:
            stale = self._evict_expired_locked()
            count = len(self._pending)
        self._cancel_all(stale)
        return count

    def __contains__(self, nonce: object) -> bool:
        with self._lock:
            entry = self._pending.get(nonce)  # type: ignore[arg-type]
            return entry is not None and not self._expired(entry)

    def __enter__(self) -> "NonceRegistry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _expired(self, entry: _PendingNonce) -> bool:
        return self._clock() >= entry.expires_at

    def _evict_expired_locked(self) -> List[_PendingNonce]:
        """Pop expired entries; caller holds the lock and cancels their timers."""
        stale = [n for n, entry in self._pending.items() if self._expired(entry)]
        return [self._pending.pop(n) for n in stale]

    @staticmethod
    def _cancel_all(entries: Iterable[_PendingNonce]) -> None:
        for entry in entries:
            entry.cancel_timer()

    def add(self, nonce: str, ttl_seconds: float) -> None:
        """
        Track a nonce for ``ttl_seconds``.

        Args:
            nonce: Nonce embedded in a login URL
            ttl_seconds: Lifetime before the nonce is discarded
        """
        now = self._clock()
        entry = _PendingNonce(created_at=now, expires_at=now + ttl_seconds)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            entry.timer = loop.call_later(ttl_seconds, self._expire, nonce)
            entry.loop = loop

        with self._lock:
            stale = self._evict_expired_locked()
            self._pending[nonce] = entry
        self._cancel_all(stale)

    def _expire(self, nonce: str) -> None:
        with self._lock:
            entry = self._pending.pop(nonce, None)
        if entry is not None:
            logger.debug("Login nonce expired before being used")

    def discard(self, nonce: str) -> None:
        """Remove a nonce if present (no-op otherwise)."""
        with self._lock:
            entry = self._pending.pop(nonce, None)
            stale = self._evict_expired_locked()
        if entry is not None:
            stale.append(entry)
        self._cancel_all(stale)

    def consume(self, nonce: str) -> bool:
        """
        Remove a nonce and report whether it was still valid.

        Returns:
            True if the nonce was pending and unexpired, False otherwise
        """
        with self._lock:
            entry = self._pending.pop(nonce, None)
            valid = entry is not None and not self._expired(entry)
            stale = self._evict_expired_locked()
        if entry is not None:
            stale.append(entry)
        self._cancel_all(stale)
        return valid

    def purge_expired(self) -> int:
        """
        Drop every expired nonce.

        Returns:
            Number of nonces removed
        """
        with self._lock:
            stale = self._evict_expired_locked()
        self._cancel_all(stale)
        return len(stale)

    def close(self) -> None:
        """Cancel every scheduled removal and forget all nonces."""
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        self._cancel_all(entries)



_default_registry = NonceRegistry()


def default_nonce_registry() -> NonceRegistry:
    """Process-wide registry used when none is injected."""
    return _default_registry


@dataclass(frozen=True)
class LoginUrl:
    """Authorization URL and the nonce embedded in its ``state`` parameter."""

    url: str
    nonce: str


class OAuthSessionManager:
    """
    Issues login URLs and validates their nonces on callback.

    Example:
        sessions = OAuthSessionManager(config)
        login = sessions.create_login_url()
        # redirect the user to login.url, keep login.nonce
        sessions.consume_nonce(state_from_callback)
    """

    def __init__(
        self,
        config: LinkedinClientConfig,
        registry: Optional[NonceRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize session manager.

        Args:
            config: Client configuration
            registry: Nonce registry (process-wide default if not provided)
            logger: Logger for login events (module logger if not provided)
        """
        self.config = config
        self.registry = registry if registry is not None else default_nonce_registry()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def validates_csrf(self) -> bool:
        return not self.config.no_validate_csrf

    def create_login_url(self, scopes: Optional[Iterable[str]] = None) -> LoginUrl:
        """
        Build an authorization URL for a new login attempt.

        Args:
            scopes: Scopes to request (configured/default scopes if None)

        Returns:
            LoginUrl with the URL to redirect the user to and its nonce
        """
        nonce = generate_nonce()
        scope_list = [getattr(s, "value", s) for s in scopes] if scopes else self.config.scopes

        query = urlencode(
            {
                "client_id": self.config.client_id,
                "redirect_uri": self.config.oauth_callback_url,
                "response_type": "code",
                "state": nonce,
                "scope": " ".join(scope_list),
            },
            quote_via=quote,
        )
        url = f"{LOGIN_URL}?{query}"

        if self.validates_csrf:
            self.registry.add(nonce, self.config.nonce_expiration_seconds)

        self.logger.info(f"Created login URL requesting scopes: {' '.join(scope_list)}")
        self.logger.debug(f"Login URL: {url}")
        return LoginUrl(url=url, nonce=nonce)

    def consume_nonce(self, nonce: str) -> None:
        """
        Validate and consume a callback nonce.

        Args:
            nonce: ``state`` value received on the OAuth callback

        Raises:
            InvalidStateError: If CSRF validation is enabled and the nonce
                               was never issued, already used, or expired
        """
        if not self.validates_csrf:
            return

        if not self.registry.consume(nonce):
            self.logger.error("OAuth callback state does not match a pending login attempt")
            raise InvalidStateError(nonce)
