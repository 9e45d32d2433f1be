"""
Multi-part video upload and finalize.

LinkedIn splits a video upload into byte ranges, each with its own
upload URL. All chunks are PUT concurrently, the ETag of every chunk is
collected, and the ETags are sent back in part order to finalize the
asset. Finalize may be answered with a transient error while LinkedIn is
still validating a long video; it is retried within a fixed budget.

State machine:
    UPLOADING -> ALL_PARTS_UPLOADED -> FINALIZING -> FINALIZED
    any state -> FAILED
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence

import httpx

from ..constants import LinkedinMediaType, asset_url
from ..exceptions import ChunkUploadError, FinalizeUploadError
from ..retry import RetryPolicy
from ..transport import LinkedinTransport, response_body
from .types import PartResult, UploadOutcome, UploadPart, UploadState, VideoUploadTarget, ordered_etags


def slice_chunks(payload: bytes, parts: Sequence[UploadPart]) -> List[bytes]:
    """
    Cut the payload into the chunk of each part.

    A single part receives the whole payload. Otherwise every part gets
    exactly its inclusive [first_byte, last_byte] range.

    Raises:
        ValueError: If the ranges are not contiguous from byte 0 or do
                    not cover the whole payload
    """
    if not parts:
        raise ValueError("A video upload needs at least one part")
    if len(parts) == 1:
        return [payload]

    expected_first = 0
    for index, part in enumerate(parts):
        if part.first_byte != expected_first or part.last_byte < part.first_byte:
            raise ValueError(
                f"Part {index} range [{part.first_byte}, {part.last_byte}] does not "
                f"continue at byte {expected_first}"
            )
        expected_first = part.last_byte + 1
    if expected_first != len(payload):
        raise ValueError(
            f"Upload parts cover {expected_first} bytes but the payload has {len(payload)}"
        )

    return [payload[part.first_byte : part.last_byte + 1] for part in parts]


class VideoUpload:
    """
    One multi-part video upload, from first chunk to finalize.

    Attributes:
        target: Upload target returned by initializeUpload
        state: Current UploadState
        part_results: ETag of each uploaded part
        finalize_attempts: Finalize requests issued so far
        attempts_left: Finalize retries still available
        outcome: Terminal UploadOutcome once the upload is done
    """

    def __init__(
        self,
        transport: LinkedinTransport,
        target: VideoUploadTarget,
        payload: Optional[bytes],
        access_token: Any,
        retry_policy: RetryPolicy,
        settle_delay_ms: float = 500,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize a video upload.

        Args:
            transport: HTTP transport
            target: Video upload target (URN, token, byte-range parts)
            payload: Complete video bytes (None when only finalizing)
            access_token: Bearer token used for every request
            retry_policy: Finalize retry budget and backoff
            settle_delay_ms: Wait between the last chunk and finalize
            logger: Logger for this upload (module logger if not provided)

        Raises:
            ValueError: If the parts do not cover the payload
        """
        self.transport = transport
        self.target = target
        self.access_token = access_token
        self.retry_policy = retry_policy
        self.settle_delay_ms = settle_delay_ms
        self.logger = logger or logging.getLogger(__name__)
        self.chunks = slice_chunks(payload, target.parts) if payload is not None else []

        self.state = UploadState.UPLOADING
        self.part_results: List[PartResult] = []
        self.finalize_attempts = 0
        self.attempts_left = retry_policy.budget
        self.outcome: Optional[UploadOutcome] = None

    async def run(self) -> UploadOutcome:
        """
        Upload every chunk, wait for LinkedIn to settle, then finalize.

        Returns:
            UploadOutcome in state FINALIZED

        Raises:
            ChunkUploadError: If any chunk fails (nothing is finalized)
            FinalizeUploadError: If finalize fails within the retry budget
            LinkedinConnectionError: If LinkedIn can not be reached
        """
        etags = await self.upload_parts()
        await self.retry_policy.sleep(self.settle_delay_ms / 1000)
        return await self.finalize(etags)

    async def upload_parts(self) -> List[str]:
        """
        PUT all chunks concurrently and collect their ETags.

        Every request is allowed to settle before a failure is reported.

        Returns:
            ETags in part order
        """
        if not self.chunks:
            raise ValueError(f"No payload to upload for video {self.target.urn}")

        self.logger.info(
            f"Uploading {sum(len(c) for c in self.chunks)} bytes of video "
            f"{self.target.urn} in {len(self.chunks)} chunk(s)"
        )
        results = await asyncio.gather(
            *(
                self._upload_part(index, part, chunk)
                for index, (part, chunk) in enumerate(zip(self.target.parts, self.chunks))
            ),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            self._fail(f"{len(failures)} of {len(results)} chunk(s) failed to upload")
            raise failures[0]

        self.part_results = list(results)
        etags = ordered_etags(self.part_results)
        self.state = UploadState.ALL_PARTS_UPLOADED
        self.logger.debug(f"Chunk ETags for {self.target.urn}: {etags}")
        return etags

    async def _upload_part(self, index: int, part: UploadPart, chunk: bytes) -> PartResult:
        headers = self.transport.api_headers(self.access_token, "application/octet-stream")
        headers["Content-Length"] = str(len(chunk))

        self.logger.debug(f"Uploading chunk {index} ({len(chunk)} bytes) to {part.upload_url}")
        response = await self.transport.request("PUT", part.upload_url, headers=headers, content=chunk)

        if not response.is_success:
            body = response_body(response)
            self.logger.error(f"Chunk {index} upload failed: {response.status_code} - {body}")
            raise ChunkUploadError(index, data=body, status=response.status_code)

        etag = response.headers.get("etag")
        if not etag:
            self.logger.error(f"Chunk {index} upload response has no ETag header")
            raise ChunkUploadError(
                index, data={"error": "missing ETag header"}, status=response.status_code
            )

        return PartResult(part_index=index, etag=etag)

    async def finalize(self, etags: Sequence[str]) -> UploadOutcome:
        """
        Finalize the asset, retrying while LinkedIn is still processing.

        Args:
            etags: Chunk ETags in part order

        Returns:
            UploadOutcome in state FINALIZED

        Raises:
            FinalizeUploadError: Once retries are exhausted or disabled
        """
        self.state = UploadState.FINALIZING
        body = {
            "finalizeUploadRequest": {
                "uploadToken": self.target.upload_token,
                "video": self.target.urn,
                "uploadedPartIds": list(etags),
            }
        }
        url = f"{asset_url(LinkedinMediaType.VIDEO)}?action=finalizeUpload"

        async def send() -> httpx.Response:
            self.finalize_attempts += 1
            self.logger.debug(f"Finalizing video {self.target.urn} (attempt {self.finalize_attempts})")
            return await self.transport.request(
                "POST", url, headers=self.transport.api_headers(self.access_token), json=body
            )

        response = await self.retry_policy.run(
            send,
            is_transient=lambda r: not r.is_success,
            description=f"Finalize of video {self.target.urn}",
            on_retry=self._on_retry,
        )

        if not response.is_success:
            data = response_body(response)
            self._fail(f"finalize failed with status {response.status_code}", etags)
            raise FinalizeUploadError(data=data, status=response.status_code)

        self.state = UploadState.FINALIZED
        self.outcome = UploadOutcome(
            state=UploadState.FINALIZED,
            urn=self.target.urn,
            etags=tuple(etags),
            finalize_attempts=self.finalize_attempts,
        )
        self.logger.info(f"Video {self.target.urn} finalized after {self.finalize_attempts} attempt(s)")
        return self.outcome

    def _on_retry(self, attempt: int, remaining: int) -> None:
        self.attempts_left = remaining

    def _fail(self, reason: str, etags: Sequence[str] = ()) -> None:
        self.state = UploadState.FAILED
        self.outcome = UploadOutcome(
            state=UploadState.FAILED,
            urn=self.target.urn,
            etags=tuple(etags),
            finalize_attempts=self.finalize_attempts,
            reason=reason,
        )
        self.logger.error(f"Video upload {self.target.urn} failed: {reason}")
