"""
Upload data types.

Upload targets are a tagged union keyed by media kind: images and
documents get a single upload URL, videos get an upload token and an
ordered list of byte-range parts assigned by LinkedIn.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from ..constants import LinkedinMediaType


@dataclass(frozen=True)
class UploadPart:
    """
    One pre-assigned chunk of a multi-part video upload.

    Attributes:
        upload_url: Where to PUT this chunk
        first_byte: First byte offset (inclusive)
        last_byte: Last byte offset (inclusive)
    """

    upload_url: str
    first_byte: int
    last_byte: int

    @property
    def size(self) -> int:
        return self.last_byte - self.first_byte + 1


@dataclass(frozen=True)
class ImageUploadTarget:
    urn: str
    upload_url: str
    media_type: LinkedinMediaType = field(default=LinkedinMediaType.IMAGE, init=False)


@dataclass(frozen=True)
class DocumentUploadTarget:
    urn: str
    upload_url: str
    media_type: LinkedinMediaType = field(default=LinkedinMediaType.DOCUMENT, init=False)


@dataclass(frozen=True)
class VideoUploadTarget:
    """
    Multi-part upload target for a video.

    Attributes:
        urn: Video asset URN
        upload_token: Token to echo back at finalize (may be empty)
        parts: Byte-range parts in LinkedIn's order
    """

    urn: str
    upload_token: str
    parts: Tuple[UploadPart, ...]
    media_type: LinkedinMediaType = field(default=LinkedinMediaType.VIDEO, init=False)

    @property
    def total_size(self) -> int:
        return sum(part.size for part in self.parts)


UploadTarget = Union[ImageUploadTarget, DocumentUploadTarget, VideoUploadTarget]


@dataclass(frozen=True)
class PartResult:
    """ETag returned for one uploaded chunk, tagged with its part index."""

    part_index: int
    etag: str


def ordered_etags(results: Sequence[PartResult]) -> List[str]:
    """ETags in part order, whatever order the results were collected in."""
    return [result.etag for result in sorted(results, key=lambda r: r.part_index)]


class UploadState(str, Enum):
    """States of a multi-part video upload."""

    UPLOADING = "uploading"
    ALL_PARTS_UPLOADED = "all_parts_uploaded"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.FINALIZED, UploadState.FAILED)


@dataclass(frozen=True)
class UploadOutcome:
    """
    Terminal state of a video upload.

    Attributes:
        state: FINALIZED or FAILED
        urn: Video asset URN
        etags: Part ETags sent (or to be sent) at finalize, in part order
        finalize_attempts: Number of finalize requests issued
        reason: Failure description when state is FAILED
    """

    state: UploadState
    urn: str
    etags: Tuple[str, ...] = ()
    finalize_attempts: int = 0
    reason: Optional[str] = None

    @property
    def finalized(self) -> bool:
        return self.state is UploadState.FINALIZED

