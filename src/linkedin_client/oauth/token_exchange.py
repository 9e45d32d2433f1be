"""
Token exchange and refresh against the LinkedIn authorization server.

This module turns an authorization code (after a login callback) or a
refresh token into a fresh token pair and stores it in the TokenStore.

Initial login failures are fatal and raise. Refresh failures at the HTTP
level return None instead, so callers can fall back to a new login.
"""

import logging
from typing import Any, Dict, Optional

from ..config import LinkedinClientConfig
from ..constants import ACCESS_TOKEN_URL
from ..exceptions import LinkedinAPIError, TokenValidationError
from ..transport import LinkedinTransport, response_body
from .session import OAuthSessionManager
from .token_store import TokenPair, TokenStore
from .validations import RefreshToken, make_refresh_token, parse_access_token_response

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class TokenExchange:
    """
    Exchanges codes and refresh tokens for token pairs.

    Responsibilities:
    - Validate the login nonce before any network call
    - POST form-encoded grants to the access token endpoint
    - Validate responses against the token schema
    - Replace the TokenStore contents on success
    """

    def __init__(
        self,
        config: LinkedinClientConfig,
        transport: LinkedinTransport,
        sessions: OAuthSessionManager,
        store: TokenStore,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.transport = transport
        self.sessions = sessions
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def _grant(self, grant_type: str, **fields: str) -> Dict[str, str]:
        return {
            "grant_type": grant_type,
            **fields,
            "redirect_uri": self.config.oauth_callback_url,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

    async def _post_grant(self, form: Dict[str, str]):
        return await self.transport.request(
            "POST", ACCESS_TOKEN_URL, headers=FORM_HEADERS, data=form
        )

    @staticmethod
    def _decode(response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TokenValidationError(
                "Token endpoint returned a non-JSON body",
                data=response.text,
                status=response.status_code,
            ) from e

    async def exchange_code(self, code: str, nonce: str) -> TokenPair:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the OAuth callback
            nonce: ``state`` value from the OAuth callback

        Returns:
            The stored TokenPair

        Raises:
            InvalidStateError: If the nonce is not pending (no request is sent)
            LinkedinAPIError: If the token endpoint answers with an error status
            TokenValidationError: If the response does not match the token schema
            LinkedinConnectionError: If the token endpoint can not be reached
        """
        self.sessions.consume_nonce(nonce)

        self.logger.info("Exchanging authorization code for tokens")
        response = await self._post_grant(self._grant("authorization_code", code=code))

        if not response.is_success:
            body = response_body(response)
            self.logger.error(f"Token exchange failed: {response.status_code} - {body}")
            raise LinkedinAPIError(
                "Failed to exchange authorization code",
                data=body,
                status=response.status_code,
                code="FAILED_TOKEN_EXCHANGE",
            )

        tokens = parse_access_token_response(self._decode(response), response.status_code)
        pair = self.store.set_tokens(tokens)
        self.logger.info("Successfully exchanged authorization code for tokens")
        return pair

    async def refresh(self, refresh_token: Optional[RefreshToken] = None) -> Optional[TokenPair]:
        """
        Refresh the access token.

        Args:
            refresh_token: Refresh token to use (stored one if not provided)

        Returns:
            The new TokenPair, or None if the endpoint rejected the
            refresh (the stored tokens are left untouched in that case)

        Raises:
            NoSavedTokenError: If no refresh token is given or stored
            ExpiredTokenError: If the stored refresh token is expired
            TokenValidationError: If a success response does not match the schema
            LinkedinConnectionError: If the token endpoint can not be reached
        """
        if refresh_token is not None:
            token = make_refresh_token(refresh_token)
        else:
            token = self.store.get_refresh_token()

        self.logger.info("Refreshing access token")
        response = await self._post_grant(self._grant("refresh_token", refresh_token=str(token)))

        if not response.is_success:
            self.logger.error(
                f"Token refresh failed: {response.status_code} - {response_body(response)}"
            )
            return None

        tokens = parse_access_token_response(self._decode(response), response.status_code)
        pair = self.store.set_tokens(tokens)
        self.logger.info("Successfully refreshed tokens")
        return pair
