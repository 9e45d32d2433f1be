"""
HTTP transport for the LinkedIn client.

Thin wrapper around ``httpx.AsyncClient``. Responses are handed back
unchanged so callers decide what a failure means for their operation;
only transport-level problems (no response at all) are converted here.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .exceptions import LinkedinConnectionError


class LinkedinTransport:
    """
    Async HTTP transport with the static LinkedIn API headers.

    Attributes:
        api_version: Value sent in the LinkedIn-Version header
        restli_protocol_version: Value sent in X-Restli-Protocol-Version
        timeout: Request timeout in seconds
        _client: Underlying httpx AsyncClient
        _owns_client: Whether aclose() should close _client
        logger: Logger used by the transport and the media helpers
    """

    def __init__(
        self,
        api_version: str,
        restli_protocol_version: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize transport.

        Args:
            api_version: LinkedIn API version (e.g. "202311")
            restli_protocol_version: REST-li protocol version (e.g. "2.0.0")
            timeout: Request timeout in seconds
            client: Existing AsyncClient to borrow (creates one if not provided)
            logger: Logger for this client (module logger if not provided)
        """
        self.api_version = api_version
        self.restli_protocol_version = restli_protocol_version
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self.logger = logger or logging.getLogger(__name__)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    def api_headers(
        self,
        access_token: Any,
        content_type: Optional[str] = "application/json",
        restli: bool = True,
    ) -> Dict[str, str]:
        """
        Build headers for an authenticated LinkedIn call.

        Args:
            access_token: Bearer token (AccessToken or str)
            content_type: Content-Type header value, omitted if None
            restli: Whether to send the REST-li protocol version header

        Returns:
            Header dictionary
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "LinkedIn-Version": self.api_version,
        }
        if restli:
            headers["X-Restli-Protocol-Version"] = self.restli_protocol_version
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        data: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Send a request and return the raw response.

        Args:
            method: HTTP method (GET, POST, PUT...)
            url: Absolute request URL
            headers: Request headers
            json: JSON request body
            data: Form-encoded request body
            content: Raw bytes request body

        Returns:
            httpx.Response, whatever its status

        Raises:
            LinkedinConnectionError: If no response was received
        """
        self.logger.debug(f"{method} {url}")

        try:
            response = await self._client.request(
                method,
                url,
                headers=dict(headers or {}),
                json=json,
                data=data,
                content=content,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            self.logger.error(f"{method} {url} timed out after {self.timeout}s: {e}")
            raise LinkedinConnectionError(
                f"Request timed out after {self.timeout}s: {e}"
            ) from e
        except httpx.RequestError as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise LinkedinConnectionError(f"Failed to reach {url}: {e}") from e

        self.logger.debug(f"{method} {url} -> {response.status_code}")
        return response


def response_body(response: httpx.Response) -> Any:
    """Decoded response body: parsed JSON when possible, text otherwise."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
