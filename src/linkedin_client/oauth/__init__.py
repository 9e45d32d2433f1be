"""
OAuth 2.0 support for the LinkedIn API.

Authorization Code flow with anti-CSRF ``state`` nonces, token exchange
and refresh, and in-memory token lifecycle. Token persistence is left to
the caller.

Public API:
    NonceRegistry: Outstanding login nonces with TTL expiry
    OAuthSessionManager: Login URL generation and nonce validation
    TokenExchange: Code exchange and token refresh
    TokenStore: Current token pair with expiry checks
    TokenPair: Access/refresh tokens with absolute expirations
"""

from .session import LoginUrl, NonceRegistry, OAuthSessionManager, default_nonce_registry, generate_nonce
from .token_exchange import TokenExchange
from .token_store import TokenPair, TokenStore
from .validations import (
    AccessToken,
    AccessTokenResponse,
    RefreshToken,
    make_access_token,
    make_refresh_token,
    parse_access_token_response,
)

__all__ = [
    # Session
    "LoginUrl",
    "NonceRegistry",
    "OAuthSessionManager",
    "default_nonce_registry",
    "generate_nonce",
    # Tokens
    "TokenExchange",
    "TokenPair",
    "TokenStore",
    # Validation
    "AccessToken",
    "AccessTokenResponse",
    "RefreshToken",
    "make_access_token",
    "make_refresh_token",
    "parse_access_token_response",
]
