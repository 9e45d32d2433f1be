"""
Validation of OAuth token responses and token values.

The token endpoint response is parsed with a strict pydantic model so a
malformed body (missing ``access_token``, non-numeric expiry...) is
reported as a TokenValidationError instead of leaking into the token
store. Raw token strings are wrapped in small value types so a plain
string can not be passed where a validated token is expected.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from ..exceptions import TokenValidationError


class AccessTokenResponse(BaseModel):
    """
    Response of the LinkedIn ``/accessToken`` endpoint.

    Attributes:
        access_token: Opaque access token
        expires_in: Access token lifetime in seconds
        refresh_token: Opaque refresh token (only for apps with refresh enabled)
        refresh_token_expires_in: Refresh token lifetime in seconds
        scope: Granted scopes, comma separated
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: StrictStr = Field(..., min_length=1)
    expires_in: StrictInt = Field(..., ge=0)
    refresh_token: Optional[StrictStr] = None
    refresh_token_expires_in: Optional[StrictInt] = Field(default=None, ge=0)
    scope: Optional[str] = None

    @property
    def has_refresh_token(self) -> bool:
        """Refresh token and its lifetime are both present."""
        return bool(self.refresh_token) and self.refresh_token_expires_in is not None


def parse_access_token_response(payload: Any, status: Optional[int] = None) -> AccessTokenResponse:
    """
    Validate a decoded token endpoint body.

    Args:
        payload: Decoded JSON body
        status: HTTP status of the response, kept on the error

    Returns:
        AccessTokenResponse

    Raises:
        TokenValidationError: If the body does not match the schema
    """
    try:
        return AccessTokenResponse.model_validate(payload)
    except ValidationError as e:
        raise TokenValidationError(
            f"Invalid response from token endpoint: {e.error_count()} validation error(s)",
            data={"errors": e.errors(include_url=False), "body": payload},
            status=status,
        ) from e


@dataclass(frozen=True)
class AccessToken:
    """Validated access token. Build with make_access_token()."""

    value: str

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "AccessToken(***)"


@dataclass(frozen=True)
class RefreshToken:
    """Validated refresh token. Build with make_refresh_token()."""

    value: str

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "RefreshToken(***)"


def _validate_raw_token(token: Any, token_type: str) -> str:
    if not isinstance(token, str) or not token:
        raise TokenValidationError(f"Invalid {token_type} token: expected a non-empty string")
    return token


def make_access_token(token: Any) -> AccessToken:
    """Wrap a raw string as an AccessToken (existing AccessTokens pass through)."""
    if isinstance(token, AccessToken):
        return token
    return AccessToken(_validate_raw_token(token, "access"))


def make_refresh_token(token: Any) -> RefreshToken:
    """Wrap a raw string as a RefreshToken (existing RefreshTokens pass through)."""
    if isinstance(token, RefreshToken):
        return token
    return RefreshToken(_validate_raw_token(token, "refresh"))
