"""
Media upload support: asset registration, single-shot uploads for images
and documents, and the multi-part video upload with finalize.
"""

from .initialize import UploadInitializer
from .source import MediaSource, load_media
from .types import (
    DocumentUploadTarget,
    ImageUploadTarget,
    PartResult,
    UploadOutcome,
    UploadPart,
    UploadState,
    UploadTarget,
    VideoUploadTarget,
    ordered_etags,
)
from .upload import upload_single
from .video import VideoUpload, slice_chunks

__all__ = [
    "UploadInitializer",
    "MediaSource",
    "load_media",
    "DocumentUploadTarget",
    "ImageUploadTarget",
    "PartResult",
    "UploadOutcome",
    "UploadPart",
    "UploadState",
    "UploadTarget",
    "VideoUploadTarget",
    "ordered_etags",
    "upload_single",
    "VideoUpload",
    "slice_chunks",
]
