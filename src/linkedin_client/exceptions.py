"""
Exception classes for the LinkedIn client.

Every error raised by this package derives from LinkedinClientError and
carries a stable ``code`` so callers can branch on the failure stage
without parsing messages. API failures also carry the HTTP status and the
raw response body in ``data``.
"""

from typing import Any, Iterable, Optional


class LinkedinClientError(Exception):
    """Base exception for all LinkedIn client errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        data: Any = None,
        status: Optional[int] = None,
    ):
        """
        Initialize client error.

        Args:
            message: Human-readable error message
            code: Stable machine-readable error code
            data: Additional error details (e.g. raw response body)
            status: HTTP status code if applicable
        """
        self.message = message
        self.code = code
        self.data = data
        self.status = status
        super().__init__(self.message)


class ConfigurationError(LinkedinClientError):
    """Client configuration holds an invalid value."""

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_CONFIGURATION")


class MissingParameterError(LinkedinClientError):
    """One or more required configuration parameters are missing."""

    def __init__(self, parameter_list: Iterable[str]):
        parameter_list = list(parameter_list)
        super().__init__(
            f"Missing parameter(s): {', '.join(parameter_list)}",
            code="MISSING_PARAMETER",
            data={"parameter_list": parameter_list},
        )
        self.parameter_list = parameter_list


class NoSavedTokenError(LinkedinClientError):
    """No access or refresh token has been saved for this client."""

    def __init__(self, token_type: str = "access"):
        super().__init__(
            f"Could not find a saved {token_type} token for this account, "
            f"please perform the log in process",
            code=f"NO_SAVED_{token_type.upper()}_TOKEN",
        )
        self.token_type = token_type


class ExpiredTokenError(LinkedinClientError):
    """The saved access or refresh token is past its expiration time."""

    def __init__(self, token_type: str = "access"):
        super().__init__(
            f"Saved {token_type} token is expired, please perform the log in process",
            code=f"EXPIRED_{token_type.upper()}_TOKEN",
        )
        self.token_type = token_type


class InvalidStateError(LinkedinClientError):
    """OAuth state nonce was never issued, already consumed, or expired."""

    def __init__(self, nonce: str):
        super().__init__(
            f"Nonce {nonce} could not be found in the state",
            code="INVALID_STATE",
            data={"nonce": nonce},
        )
        self.nonce = nonce


class TokenValidationError(LinkedinClientError):
    """Token endpoint response (or a raw token value) failed schema validation."""

    def __init__(self, message: str, data: Any = None, status: Optional[int] = None):
        super().__init__(message, code="INVALID_TOKEN_RESPONSE", data=data, status=status)


class LinkedinConnectionError(LinkedinClientError):
    """Request never produced an HTTP response (connect error, timeout...)."""

    def __init__(self, message: str):
        super().__init__(message, code="CONNECTION_ERROR")


class LinkedinAPIError(LinkedinClientError):
    """The LinkedIn API answered with an error."""

    def __init__(
        self,
        message: str,
        data: Any = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        status_label = status if status is not None else "unknown"
        super().__init__(
            f'Error when calling LinkedIn API (status: {status_label}) :: "{message}"',
            code=f"LINKEDIN_API_ERROR_{code}" if code else "LINKEDIN_API_ERROR",
            data=data,
            status=status,
        )


class UploadInitError(LinkedinAPIError):
    """Asset registration (initializeUpload) failed or returned an unexpected shape."""

    def __init__(self, media_type: str, data: Any = None, status: Optional[int] = None):
        super().__init__(
            f"Failed to initialize upload for {media_type}",
            data=data,
            status=status,
            code=f"FAILED_{media_type.upper()}_UPLOAD_INIT",
        )
        self.media_type = media_type


class ChunkUploadError(LinkedinAPIError):
    """A single video chunk PUT failed."""

    def __init__(self, part_index: int, data: Any = None, status: Optional[int] = None):
        super().__init__(
            f"Failed to upload video chunk {part_index}",
            data=data,
            status=status,
            code="FAILED_VIDEO_CHUNK_UPLOAD",
        )
        self.part_index = part_index


class FinalizeUploadError(LinkedinAPIError):
    """Video finalize did not succeed within the retry budget."""

    def __init__(self, data: Any = None, status: Optional[int] = None):
        super().__init__(
            "Failed to finalize video upload",
            data=data,
            status=status,
            code="FAILED_VIDEO_UPLOAD_FINALIZE",
        )


class DownloadMediaError(LinkedinClientError):
    """Media source could not be read or downloaded."""

    pass


class InvalidMediaTypeError(LinkedinClientError):
    """Media kind is not supported by the requested operation."""

    def __init__(self, media_type: Any):
        super().__init__(
            f"Invalid media type {media_type}",
            code="INVALID_MEDIA_TYPE",
            data={"media_type": media_type},
        )
