"""
Configuration for the LinkedIn client.

Configuration can be loaded from environment variables or provided
programmatically. Required OAuth credentials are validated at
construction time so a misconfigured client fails before any request.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .constants import API_VERSION, DEFAULT_OAUTH_SCOPES, RESTLI_PROTOCOL_VERSION
from .exceptions import ConfigurationError, MissingParameterError

REQUIRED_FIELDS = ("client_id", "client_secret", "oauth_callback_url")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LinkedinClientConfig:
    """
    Configuration for the LinkedIn client.

    Attributes:
        client_id: LinkedIn app client ID
        client_secret: LinkedIn app client secret
        oauth_callback_url: Redirect URI registered for the app
        oauth_scopes: Scopes requested at login (default scope set if None)
        retry_attempts: Retry budget for tolerated transient failures
        default_delay_between_requests_ms: Settle delay and backoff base
        no_retries: Disable every retry loop
        no_validate_csrf: Disable nonce tracking and validation entirely
        nonce_expiration_ms: Lifetime of an unconsumed login nonce
        api_version: Value of the LinkedIn-Version header
        restli_protocol_version: Value of the X-Restli-Protocol-Version header
        request_timeout: HTTP timeout in seconds
    """

    client_id: str
    client_secret: str
    oauth_callback_url: str

    oauth_scopes: Optional[Sequence[str]] = None

    # Retry behaviour
    retry_attempts: int = 3
    default_delay_between_requests_ms: int = 500
    no_retries: bool = False

    # CSRF protection
    no_validate_csrf: bool = False
    nonce_expiration_ms: int = 60000

    # Static API headers
    api_version: str = API_VERSION
    restli_protocol_version: str = RESTLI_PROTOCOL_VERSION

    request_timeout: float = 30.0

    scopes: List[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise MissingParameterError(missing)

        if self.retry_attempts < 0:
            raise ConfigurationError("retry_attempts cannot be negative")

        if self.default_delay_between_requests_ms < 0:
            raise ConfigurationError("default_delay_between_requests_ms cannot be negative")

        if self.nonce_expiration_ms <= 0:
            raise ConfigurationError(
                f"nonce_expiration_ms must be positive, got {self.nonce_expiration_ms}"
            )

        self.scopes = list(self.oauth_scopes) if self.oauth_scopes else list(DEFAULT_OAUTH_SCOPES)

    @property
    def default_delay_seconds(self) -> float:
        return self.default_delay_between_requests_ms / 1000

    @property
    def nonce_expiration_seconds(self) -> float:
        return self.nonce_expiration_ms / 1000

    @classmethod
    def from_env(cls) -> "LinkedinClientConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            LINKEDIN_CLIENT_ID: LinkedIn app client ID
            LINKEDIN_CLIENT_SECRET: LinkedIn app client secret
            LINKEDIN_OAUTH_CALLBACK_URL: Registered redirect URI

        Optional environment variables:
            LINKEDIN_OAUTH_SCOPES: Space separated scopes
            LINKEDIN_RETRY_ATTEMPTS: Retry budget (default: 3)
            LINKEDIN_DEFAULT_DELAY_MS: Delay between requests (default: 500)
            LINKEDIN_NO_RETRIES: Disable retries (true/false)
            LINKEDIN_NO_VALIDATE_CSRF: Disable nonce validation (true/false)
            LINKEDIN_NONCE_EXPIRATION_MS: Nonce lifetime (default: 60000)

        Returns:
            LinkedinClientConfig instance

        Raises:
            MissingParameterError: If required environment variables are missing
        """
        scopes = os.environ.get("LINKEDIN_OAUTH_SCOPES")

        return cls(
            client_id=os.environ.get("LINKEDIN_CLIENT_ID", ""),
            client_secret=os.environ.get("LINKEDIN_CLIENT_SECRET", ""),
            oauth_callback_url=os.environ.get("LINKEDIN_OAUTH_CALLBACK_URL", ""),
            oauth_scopes=scopes.split() if scopes else None,
            retry_attempts=int(os.environ.get("LINKEDIN_RETRY_ATTEMPTS", "3")),
            default_delay_between_requests_ms=int(
                os.environ.get("LINKEDIN_DEFAULT_DELAY_MS", "500")
            ),
            no_retries=_env_flag("LINKEDIN_NO_RETRIES"),
            no_validate_csrf=_env_flag("LINKEDIN_NO_VALIDATE_CSRF"),
            nonce_expiration_ms=int(os.environ.get("LINKEDIN_NONCE_EXPIRATION_MS", "60000")),
        )
