"""
LinkedIn API client.

High-level interface over the OAuth session, token exchange, token store
and media upload components. It drives the whole flow:

1. create_login_url() returns the URL to redirect the user to
2. exchange_code() validates the callback nonce and stores the tokens
3. authenticated calls read the stored access token (or take one
   explicitly); expiry is reported, never silently refreshed, unless the
   caller goes through ensure_access_token()

Token persistence is the caller's job: read ``client.tokens.pair`` after
a login and feed saved tokens back with set_tokens().
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import httpx

from .config import LinkedinClientConfig
from .constants import (
    FEED_UPDATE_URL,
    SHARE_POST_URL,
    USER_PROFILE_URL,
    LinkedinMediaType,
    asset_url,
    post_comment_url,
)
from .exceptions import ExpiredTokenError, LinkedinAPIError, NoSavedTokenError
from .media.initialize import UploadInitializer
from .media.source import MediaSource, load_media
from .media.types import UploadOutcome, UploadTarget, VideoUploadTarget
from .media.upload import upload_single
from .media.video import VideoUpload
from .oauth.session import LoginUrl, NonceRegistry, OAuthSessionManager
from .oauth.token_exchange import TokenExchange
from .oauth.token_store import TokenPair, TokenStore
from .oauth.validations import (
    AccessToken,
    AccessTokenResponse,
    RefreshToken,
    make_access_token,
    parse_access_token_response,
)
from .retry import RetryPolicy, Sleep
from .transport import LinkedinTransport, response_body

ASSET_PENDING_STATUSES = ("PROCESSING", "WAITING_UPLOAD")


@dataclass(frozen=True)
class SharedPost:
    """
    Result of publishing a post.

    Attributes:
        post_urn: URN from the x-restli-id response header
        post_url: Public feed URL of the post
        payload: Payload that was published
    """

    post_urn: str
    post_url: str
    payload: Dict[str, Any]


class LinkedinClient:
    """
    Client for the LinkedIn REST API.

    Example:
        config = LinkedinClientConfig.from_env()
        async with LinkedinClient(config) as client:
            login = client.create_login_url()
            # redirect the user to login.url ... then on callback:
            await client.exchange_code(code, state)
            urn = await client.upload_media(
                LinkedinMediaType.IMAGE, owner="urn:li:person:abc", source=image_bytes
            )
    """

    def __init__(
        self,
        config: LinkedinClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        registry: Optional[NonceRegistry] = None,
        token_store: Optional[TokenStore] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize LinkedIn client.

        Args:
            config: Client configuration
            http_client: AsyncClient to borrow (a private one is created if not provided)
            registry: Nonce registry (process-wide default if not provided)
            token_store: Token store (an empty one is created if not provided)
            logger: Logger used by the client and every component it builds
            sleep: Coroutine used for settle and backoff delays
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep

        self.transport = LinkedinTransport(
            api_version=config.api_version,
            restli_protocol_version=config.restli_protocol_version,
            timeout=config.request_timeout,
            client=http_client,
            logger=self.logger,
        )
        self.sessions = OAuthSessionManager(config, registry, logger=self.logger)
        self.tokens = token_store or TokenStore(logger=self.logger)
        self.exchange = TokenExchange(
            config, self.transport, self.sessions, self.tokens, logger=self.logger
        )
        self.uploads = UploadInitializer(self.transport, logger=self.logger)

    async def __aenter__(self) -> "LinkedinClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        await self.transport.aclose()

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            retries=self.config.retry_attempts,
            no_retries=self.config.no_retries,
            base_delay_ms=self.config.default_delay_between_requests_ms,
            sleep=self.sleep,
            logger=self.logger,
        )

    # Login and tokens

    def create_login_url(self, scopes: Optional[Iterable[str]] = None) -> LoginUrl:
        """Authorization URL plus the nonce to expect back as ``state``."""
        return self.sessions.create_login_url(scopes)

    async def exchange_code(self, code: str, nonce: str) -> TokenPair:
        """Validate the callback nonce and exchange the code for tokens."""
        return await self.exchange.exchange_code(code, nonce)

    async def refresh_access_token(
        self, refresh_token: Optional[Union[RefreshToken, str]] = None
    ) -> Optional[TokenPair]:
        """
        Refresh the stored tokens.

        Returns None when LinkedIn rejects the refresh; the caller should
        run the login flow again.
        """
        return await self.exchange.refresh(refresh_token)

    def set_tokens(self, tokens: Union[AccessTokenResponse, Mapping[str, Any]]) -> TokenPair:
        """
        Store tokens obtained elsewhere (e.g. loaded from the caller's storage).

        Args:
            tokens: Token endpoint response, validated if given as a mapping
        """
        if not isinstance(tokens, AccessTokenResponse):
            tokens = parse_access_token_response(dict(tokens))
        return self.tokens.set_tokens(tokens)

    def clear_tokens(self) -> None:
        self.tokens.clear_tokens()

    @property
    def access_token(self) -> AccessToken:
        return self.tokens.get_access_token()

    @property
    def refresh_token(self) -> RefreshToken:
        return self.tokens.get_refresh_token()

    @property
    def access_token_expiration(self) -> datetime:
        return self.tokens.access_token_expiration

    @property
    def refresh_token_expiration(self) -> datetime:
        return self.tokens.refresh_token_expiration

    async def ensure_access_token(self) -> AccessToken:
        """
        Current access token, refreshing once if it has expired.

        Raises:
            NoSavedTokenError: If no tokens were ever stored
            ExpiredTokenError: If the access token expired and the refresh
                               failed or no usable refresh token exists
        """
        try:
            return self.tokens.get_access_token()
        except ExpiredTokenError as expired:
            self.logger.info("Access token expired, refreshing")
            try:
                pair = await self.exchange.refresh()
            except (NoSavedTokenError, ExpiredTokenError):
                pair = None
            if pair is None:
                raise expired
            return pair.access_token

    def _token(self, access_token: Optional[Union[AccessToken, str]]) -> AccessToken:
        if access_token is not None:
            return make_access_token(access_token)
        return self.tokens.get_access_token()

    # Media uploads

    async def initialize_upload(
        self,
        media_type: LinkedinMediaType,
        owner: str,
        file_size_bytes: Optional[int] = None,
        upload_captions: Optional[bool] = None,
        upload_thumbnail: Optional[bool] = None,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> UploadTarget:
        """Register an asset and return its upload target."""
        return await self.uploads.initialize(
            media_type,
            owner,
            self._token(access_token),
            file_size_bytes=file_size_bytes,
            upload_captions=upload_captions,
            upload_thumbnail=upload_thumbnail,
        )

    async def upload_image_or_document(
        self,
        upload_url: str,
        source: MediaSource,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> bool:
        """Upload a whole image or document to the URL from initialize_upload()."""
        token = self._token(access_token)
        payload = await load_media(source, self.transport)
        return await upload_single(self.transport, upload_url, payload, token)

    def video_upload(
        self,
        target: VideoUploadTarget,
        payload: bytes,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> VideoUpload:
        """Build the upload state machine for a registered video."""
        return VideoUpload(
            self.transport,
            target,
            payload,
            self._token(access_token),
            self.retry_policy,
            settle_delay_ms=self.config.default_delay_between_requests_ms,
            logger=self.logger,
        )

    async def upload_video(
        self,
        target: VideoUploadTarget,
        source: MediaSource,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> UploadOutcome:
        """
        Upload all chunks of a registered video and finalize it.

        Raises:
            ChunkUploadError: If a chunk upload fails
            FinalizeUploadError: If finalize fails within the retry budget
        """
        token = self._token(access_token)
        payload = await load_media(source, self.transport)
        return await self.video_upload(target, payload, token).run()

    async def finalize_video_upload(
        self,
        target: VideoUploadTarget,
        etags: Iterable[str],
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> UploadOutcome:
        """Finalize a video whose chunks were uploaded separately."""
        upload = VideoUpload(
            self.transport,
            target,
            None,
            self._token(access_token),
            self.retry_policy,
            settle_delay_ms=self.config.default_delay_between_requests_ms,
            logger=self.logger,
        )
        return await upload.finalize(list(etags))

    async def upload_media(
        self,
        media_type: LinkedinMediaType,
        owner: str,
        source: MediaSource,
        upload_captions: Optional[bool] = None,
        upload_thumbnail: Optional[bool] = None,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> str:
        """
        Register, upload (and for videos finalize) a media asset.

        Returns:
            URN of the uploaded asset

        Raises:
            InvalidMediaTypeError: If the media kind can not be uploaded
                                   (checked before the source is loaded)
        """
        token = self._token(access_token)
        kind = self.uploads.uploadable_kind(media_type)
        payload = await load_media(source, self.transport)
        target = await self.uploads.initialize(
            kind,
            owner,
            token,
            file_size_bytes=len(payload),
            upload_captions=upload_captions,
            upload_thumbnail=upload_thumbnail,
        )

        if isinstance(target, VideoUploadTarget):
            await self.video_upload(target, payload, token).run()
        else:
            await upload_single(self.transport, target.upload_url, payload, token)

        self.logger.info(f"Uploaded {target.media_type.value} {target.urn}")
        return target.urn

    async def get_asset_status(
        self,
        media_type: LinkedinMediaType,
        urn: str,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> Dict[str, Any]:
        """Processing status of an uploaded asset."""
        response = await self._get_asset(media_type, urn, self._token(access_token))
        return self._asset_status_body(response, media_type, urn)

    async def wait_for_asset(
        self,
        media_type: LinkedinMediaType,
        urn: str,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> Dict[str, Any]:
        """
        Poll an asset until it leaves PROCESSING / WAITING_UPLOAD.

        Polling is bounded by the retry budget; the last status is returned
        even if the asset is still pending.
        """
        token = self._token(access_token)

        def pending(response: httpx.Response) -> bool:
            if not response.is_success:
                return False
            body = response_body(response)
            return isinstance(body, dict) and body.get("status") in ASSET_PENDING_STATUSES

        response = await self.retry_policy.run(
            lambda: self._get_asset(media_type, urn, token),
            is_transient=pending,
            description=f"Status of {urn}",
            explain=lambda r: f"is still {response_body(r).get('status')}",
        )
        return self._asset_status_body(response, media_type, urn)

    async def _get_asset(self, media_type: LinkedinMediaType, urn: str, token: AccessToken):
        return await self.transport.request(
            "GET",
            f"{asset_url(media_type)}/{urn}",
            headers=self.transport.api_headers(token, content_type=None, restli=False),
        )

    def _asset_status_body(self, response: httpx.Response, media_type, urn: str) -> Dict[str, Any]:
        body = response_body(response)
        if not response.is_success:
            self.logger.error(f"Failed to get status of {urn}: {response.status_code} - {body}")
            raise LinkedinAPIError(
                f"Failed to get asset status for {LinkedinMediaType(media_type).value} {urn}",
                data=body,
                status=response.status_code,
                code="FAILED_GET_ASSET_STATUS",
            )
        return body

    # Profile, posts and comments

    async def get_self_profile(
        self, access_token: Optional[Union[AccessToken, str]] = None
    ) -> Dict[str, Any]:
        """Profile of the authenticated member (``GET /v2/me``)."""
        response = await self.transport.request(
            "GET",
            USER_PROFILE_URL,
            headers={"Authorization": f"Bearer {self._token(access_token)}"},
        )
        self.logger.debug(f"get_self_profile response {response.status_code}")

        if not response.is_success:
            body = response_body(response)
            self.logger.error(f"Failed to get user profile {response.status_code} - {body}")
            raise LinkedinAPIError(
                "Failed to get user profile",
                data=body,
                status=response.status_code,
                code="FAILED_GET_PROFILE",
            )
        return response.json()

    async def share_post(
        self,
        payload: Dict[str, Any],
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> SharedPost:
        """
        Publish a post.

        Args:
            payload: Posts API payload (author, commentary, visibility,
                     distribution, optional content...)

        Returns:
            SharedPost with the new post URN and its feed URL
        """
        response = await self.transport.request(
            "POST",
            SHARE_POST_URL,
            headers=self.transport.api_headers(self._token(access_token)),
            json=payload,
        )
        self.logger.debug(f"share_post response {response.status_code}")

        if not response.is_success:
            body = response_body(response)
            self.logger.error(f"Failed to share post {response.status_code} - {body}")
            raise LinkedinAPIError(
                "Failed to share post",
                data=body,
                status=response.status_code,
                code="FAILED_SHARE_POST",
            )

        post_urn = response.headers.get("x-restli-id")
        if not post_urn:
            self.logger.error("Post shared but the response carries no x-restli-id header")
            raise LinkedinAPIError(
                "Failed to get post id", data={}, status=response.status_code, code="FAILED_POST_ID"
            )

        self.logger.info(f"Post {post_urn} shared")
        return SharedPost(
            post_urn=post_urn,
            post_url=FEED_UPDATE_URL.format(post_urn=post_urn),
            payload=payload,
        )

    async def post_comment(
        self,
        post_urn: str,
        comment: str,
        author_urn: str,
        access_token: Optional[Union[AccessToken, str]] = None,
    ) -> Dict[str, Any]:
        """
        Comment on a post.

        A 404 right after a post is created means it has not propagated
        yet; it is retried within the retry budget.

        Raises:
            LinkedinAPIError: If the comment is rejected
        """
        token = self._token(access_token)
        self.logger.info(f"Posting comment on {post_urn}")
        body = {"actor": author_urn, "object": post_urn, "message": {"text": comment}}

        response = await self.retry_policy.run(
            lambda: self.transport.request(
                "POST",
                post_comment_url(post_urn),
                headers=self.transport.api_headers(token, restli=False),
                json=body,
            ),
            is_transient=lambda r: r.status_code == 404,
            description=f"Comment on {post_urn}",
        )

        data = response_body(response)
        self.logger.debug(f"post_comment response {response.status_code} => {data}")
        if response.is_success:
            return data

        self.logger.warning(f"Failed to post comment {data}")
        raise LinkedinAPIError(
            f"Failed to post comment to post {post_urn}",
            data=data,
            status=response.status_code,
            code="FAILED_POST_COMMENT",
        )
