"""
Upload initialization (asset registration).

Each media kind negotiates its upload target with one POST to
``/rest/{kind}s?action=initializeUpload``. The three response shapes are
validated with pydantic and normalised into the UploadTarget variants.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..constants import LinkedinMediaType, asset_url
from ..exceptions import InvalidMediaTypeError, UploadInitError
from ..transport import LinkedinTransport, response_body
from .types import (
    DocumentUploadTarget,
    ImageUploadTarget,
    UploadPart,
    UploadTarget,
    VideoUploadTarget,
)


class _InitValue(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ImageInitValue(_InitValue):
    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    image: str = Field(..., min_length=1)


class DocumentInitValue(_InitValue):
    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    document: str = Field(..., min_length=1)


class UploadInstruction(_InitValue):
    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    first_byte: int = Field(..., alias="firstByte", ge=0)
    last_byte: int = Field(..., alias="lastByte", ge=0)


class VideoInitValue(_InitValue):
    video: str = Field(..., min_length=1)
    upload_token: str = Field(default="", alias="uploadToken")
    upload_instructions: List[UploadInstruction] = Field(
        ..., alias="uploadInstructions", min_length=1
    )


class UploadInitializer:
    """
    Registers assets and returns where to upload their bytes.

    Example:
        target = await initializer.initialize(
            LinkedinMediaType.VIDEO, owner="urn:li:person:123",
            access_token=token, file_size_bytes=len(payload),
        )
    """

    def __init__(self, transport: LinkedinTransport, logger: Optional[logging.Logger] = None):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self._negotiators: Dict[LinkedinMediaType, Callable[..., Awaitable[UploadTarget]]] = {
            LinkedinMediaType.IMAGE: self._initialize_image,
            LinkedinMediaType.DOCUMENT: self._initialize_document,
            LinkedinMediaType.VIDEO: self._initialize_video,
        }

    def uploadable_kind(self, media_type: Any) -> LinkedinMediaType:
        """
        Media kind for ``media_type`` if it can be uploaded.

        Raises:
            InvalidMediaTypeError: For unknown kinds and for ARTICLE
        """
        try:
            kind = LinkedinMediaType(media_type)
        except ValueError:
            raise InvalidMediaTypeError(getattr(media_type, "value", media_type)) from None
        if kind not in self._negotiators:
            raise InvalidMediaTypeError(kind.value)
        return kind

    async def initialize(
        self,
        media_type: LinkedinMediaType,
        owner: str,
        access_token: Any,
        file_size_bytes: Optional[int] = None,
        upload_captions: Optional[bool] = None,
        upload_thumbnail: Optional[bool] = None,
    ) -> UploadTarget:
        """
        Obtain an upload target for a new asset.

        Args:
            media_type: IMAGE, DOCUMENT or VIDEO
            owner: Owner URN (person or organization)
            access_token: Bearer token
            file_size_bytes: Video size in bytes (required for VIDEO)
            upload_captions: Whether captions will be uploaded (VIDEO, default False)
            upload_thumbnail: Whether a thumbnail will be uploaded (VIDEO, default False)

        Returns:
            ImageUploadTarget, DocumentUploadTarget or VideoUploadTarget

        Raises:
            InvalidMediaTypeError: If the media kind can not be uploaded
            UploadInitError: If LinkedIn rejects the request or answers
                             with an unexpected payload
        """
        kind = self.uploadable_kind(media_type)
        negotiate = self._negotiators[kind]

        if kind is LinkedinMediaType.VIDEO:
            if file_size_bytes is None:
                raise ValueError("file_size_bytes is required to initialize a video upload")
            return await negotiate(
                owner,
                access_token,
                file_size_bytes=file_size_bytes,
                upload_captions=bool(upload_captions),
                upload_thumbnail=bool(upload_thumbnail),
            )
        return await negotiate(owner, access_token)

    async def _register(
        self,
        media_type: LinkedinMediaType,
        payload: Dict[str, Any],
        access_token: Any,
        model: Type[_InitValue],
    ) -> Any:
        """POST initializeUpload and validate the ``value`` object of the response."""
        self.logger.info(f"Initializing upload for {media_type.value}")
        self.logger.debug(f"initializeUpload payload: {payload}")

        response = await self.transport.request(
            "POST",
            f"{asset_url(media_type)}?action=initializeUpload",
            headers=self.transport.api_headers(access_token),
            json={"initializeUploadRequest": payload},
        )
        body = response_body(response)
        self.logger.debug(f"initializeUpload response {response.status_code}: {body}")

        if not response.is_success or not isinstance(body, dict) or not body.get("value"):
            self.logger.error(
                f"Failed to initialize {media_type.value} upload: {response.status_code} - {body}"
            )
            raise UploadInitError(media_type.value, data=body, status=response.status_code)

        try:
            return model.model_validate(body["value"])
        except ValidationError as e:
            self.logger.error(f"Unexpected initializeUpload response for {media_type.value}: {e}")
            raise UploadInitError(media_type.value, data=body, status=response.status_code) from e

    async def _initialize_image(self, owner: str, access_token: Any) -> ImageUploadTarget:
        value = await self._register(
            LinkedinMediaType.IMAGE, {"owner": owner}, access_token, ImageInitValue
        )
        return ImageUploadTarget(urn=value.image, upload_url=value.upload_url)

    async def _initialize_document(self, owner: str, access_token: Any) -> DocumentUploadTarget:
        value = await self._register(
            LinkedinMediaType.DOCUMENT, {"owner": owner}, access_token, DocumentInitValue
        )
        return DocumentUploadTarget(urn=value.document, upload_url=value.upload_url)

    async def _initialize_video(
        self,
        owner: str,
        access_token: Any,
        file_size_bytes: int,
        upload_captions: bool = False,
        upload_thumbnail: bool = False,
    ) -> VideoUploadTarget:
        payload = {
            "owner": owner,
            "fileSizeBytes": file_size_bytes,
            "uploadCaptions": upload_captions,
            "uploadThumbnail": upload_thumbnail,
        }
        value = await self._register(LinkedinMediaType.VIDEO, payload, access_token, VideoInitValue)

        parts = tuple(
            UploadPart(
                upload_url=instruction.upload_url,
                first_byte=instruction.first_byte,
                last_byte=instruction.last_byte,
            )
            for instruction in value.upload_instructions
        )
        self.logger.info(f"Video {value.video} registered with {len(parts)} upload part(s)")
        return VideoUploadTarget(urn=value.video, upload_token=value.upload_token, parts=parts)
