"""
Async client for the LinkedIn REST API.

This package implements the OAuth 2.0 Authorization Code flow with
anti-CSRF nonces, access/refresh token lifecycle, and media uploads
(images, documents, multi-part videos with finalize), plus post and
comment publication.

Public API:
    LinkedinClientConfig: Client configuration
    LinkedinClient: High-level client
    SharedPost: Result of share_post()
    LinkedinMediaType / LinkedinOauthScope: Enumerations

Exceptions:
    LinkedinClientError: Base exception
    ConfigurationError / MissingParameterError: Configuration errors
    NoSavedTokenError / ExpiredTokenError: Token not usable
    InvalidStateError: OAuth state nonce rejected
    TokenValidationError: Token response failed validation
    LinkedinConnectionError: LinkedIn could not be reached
    LinkedinAPIError: LinkedIn answered with an error
    UploadInitError / ChunkUploadError / FinalizeUploadError: Upload stages
    DownloadMediaError / InvalidMediaTypeError: Media source errors
"""

from .client import LinkedinClient, SharedPost
from .config import LinkedinClientConfig
from .constants import API_VERSION, RESTLI_PROTOCOL_VERSION, LinkedinMediaType, LinkedinOauthScope
from .exceptions import (
    ChunkUploadError,
    ConfigurationError,
    DownloadMediaError,
    ExpiredTokenError,
    FinalizeUploadError,
    InvalidMediaTypeError,
    InvalidStateError,
    LinkedinAPIError,
    LinkedinClientError,
    LinkedinConnectionError,
    MissingParameterError,
    NoSavedTokenError,
    TokenValidationError,
    UploadInitError,
)
from .media import UploadOutcome, UploadState, VideoUploadTarget
from .oauth import LoginUrl, NonceRegistry, TokenPair, TokenStore

__version__ = "0.1.0"

__all__ = [
    # Client
    "LinkedinClient",
    "LinkedinClientConfig",
    "SharedPost",
    "API_VERSION",
    "RESTLI_PROTOCOL_VERSION",
    "LinkedinMediaType",
    "LinkedinOauthScope",
    # OAuth
    "LoginUrl",
    "NonceRegistry",
    "TokenPair",
    "TokenStore",
    # Media
    "UploadOutcome",
    "UploadState",
    "VideoUploadTarget",
    # Exceptions
    "LinkedinClientError",
    "ConfigurationError",
    "MissingParameterError",
    "NoSavedTokenError",
    "ExpiredTokenError",
    "InvalidStateError",
    "TokenValidationError",
    "LinkedinConnectionError",
    "LinkedinAPIError",
    "UploadInitError",
    "ChunkUploadError",
    "FinalizeUploadError",
    "DownloadMediaError",
    "InvalidMediaTypeError",
]
