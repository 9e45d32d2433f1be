"""Tests for upload initialization per media kind."""

import asyncio
import json

import pytest
from pytest_httpx import HTTPXMock

from linkedin_client.constants import LinkedinMediaType, asset_url
from linkedin_client.exceptions import InvalidMediaTypeError, UploadInitError
from linkedin_client.media.initialize import UploadInitializer
from linkedin_client.media.types import (
    DocumentUploadTarget,
    ImageUploadTarget,
    UploadPart,
    VideoUploadTarget,
)
from linkedin_client.transport import LinkedinTransport

OWNER = "urn:li:person:abc123"


def init_url(media_type: LinkedinMediaType) -> str:
    return f"{asset_url(media_type)}?action=initializeUpload"


def run_initialize(media_type, **kwargs):
    async def scenario():
        transport = LinkedinTransport("202311", "2.0.0")
        try:
            return await UploadInitializer(transport).initialize(
                media_type, OWNER, "token_xyz", **kwargs
            )
        finally:
            await transport.aclose()

    return asyncio.run(scenario())


class TestInitializeImageAndDocument:
    """Tests for single-URL upload targets."""

    def test_image_target(self, httpx_mock: HTTPXMock):
        """Image initialization returns the image URN and its upload URL."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.IMAGE),
            json={
                "value": {
                    "uploadUrlExpiresAt": 1650567510704,
                    "uploadUrl": "https://www.linkedin.com/dms-uploads/image-1",
                    "image": "urn:li:image:C4E10AQFoyyAjHPMQuQ",
                }
            },
        )

        target = run_initialize(LinkedinMediaType.IMAGE)

        assert target == ImageUploadTarget(
            urn="urn:li:image:C4E10AQFoyyAjHPMQuQ",
            upload_url="https://www.linkedin.com/dms-uploads/image-1",
        )
        assert target.media_type is LinkedinMediaType.IMAGE

        request = httpx_mock.get_request()
        assert json.loads(request.content) == {"initializeUploadRequest": {"owner": OWNER}}
        assert request.headers["Authorization"] == "Bearer token_xyz"
        assert request.headers["LinkedIn-Version"] == "202311"
        assert request.headers["X-Restli-Protocol-Version"] == "2.0.0"

    def test_document_target(self, httpx_mock: HTTPXMock):
        """Document initialization returns the document URN."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.DOCUMENT),
            json={
                "value": {
                    "uploadUrl": "https://www.linkedin.com/dms-uploads/doc-1",
                    "document": "urn:li:document:D5510AQ",
                }
            },
        )

        target = run_initialize("document")

        assert isinstance(target, DocumentUploadTarget)
        assert target.urn == "urn:li:document:D5510AQ"
        assert target.upload_url == "https://www.linkedin.com/dms-uploads/doc-1"


class TestInitializeVideo:
    """Tests for multi-part video targets."""

    def test_video_target_keeps_part_order(self, httpx_mock: HTTPXMock):
        """Video initialization returns every part in LinkedIn's order."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.VIDEO),
            json={
                "value": {
                    "uploadUrlsExpireAt": 1657304680000,
                    "video": "urn:li:video:C5F10AQGKQg_6y2a4sQ",
                    "uploadInstructions": [
                        {"uploadUrl": "https://up/1", "firstByte": 0, "lastByte": 4194303},
                        {"uploadUrl": "https://up/2", "firstByte": 4194304, "lastByte": 4200000},
                    ],
                    "uploadToken": "",
                }
            },
        )

        target = run_initialize(LinkedinMediaType.VIDEO, file_size_bytes=4200001)

        assert isinstance(target, VideoUploadTarget)
        assert target.urn == "urn:li:video:C5F10AQGKQg_6y2a4sQ"
        assert target.upload_token == ""
        assert target.parts == (
            UploadPart("https://up/1", 0, 4194303),
            UploadPart("https://up/2", 4194304, 4200000),
        )
        assert target.total_size == 4200001

    def test_video_flags_default_to_false(self, httpx_mock: HTTPXMock):
        """Caption and thumbnail flags are sent as false unless requested."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.VIDEO),
            json={
                "value": {
                    "video": "urn:li:video:1",
                    "uploadInstructions": [{"uploadUrl": "https://up/1", "firstByte": 0, "lastByte": 9}],
                    "uploadToken": "tok",
                }
            },
        )

        run_initialize(LinkedinMediaType.VIDEO, file_size_bytes=10)

        assert json.loads(httpx_mock.get_request().content) == {
            "initializeUploadRequest": {
                "owner": OWNER,
                "fileSizeBytes": 10,
                "uploadCaptions": False,
                "uploadThumbnail": False,
            }
        }

    def test_video_flags_forwarded(self, httpx_mock: HTTPXMock):
        """Requested caption and thumbnail flags are forwarded."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.VIDEO),
            json={
                "value": {
                    "video": "urn:li:video:1",
                    "uploadInstructions": [{"uploadUrl": "https://up/1", "firstByte": 0, "lastByte": 9}],
                }
            },
        )

        run_initialize(
            LinkedinMediaType.VIDEO, file_size_bytes=10, upload_captions=True, upload_thumbnail=True
        )

        request_body = json.loads(httpx_mock.get_request().content)["initializeUploadRequest"]
        assert request_body["uploadCaptions"] is True
        assert request_body["uploadThumbnail"] is True

    def test_video_requires_file_size(self):
        """A video cannot be registered without its size."""
        with pytest.raises(ValueError, match="file_size_bytes"):
            run_initialize(LinkedinMediaType.VIDEO)


class TestInitializeErrors:
    """Tests for initialization failures."""

    def test_article_is_not_uploadable(self, httpx_mock: HTTPXMock):
        """ARTICLE has no upload flow and sends nothing."""
        with pytest.raises(InvalidMediaTypeError) as exc_info:
            run_initialize(LinkedinMediaType.ARTICLE)

        assert exc_info.value.code == "INVALID_MEDIA_TYPE"
        assert httpx_mock.get_requests() == []

    def test_unknown_kind(self):
        """An unknown kind string is rejected."""
        with pytest.raises(InvalidMediaTypeError):
            run_initialize("gif")

    def test_error_status(self, httpx_mock: HTTPXMock):
        """A non-2xx response raises UploadInitError with the raw body."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.IMAGE),
            status_code=403,
            json={"message": "Not enough permissions", "status": 403},
        )

        with pytest.raises(UploadInitError) as exc_info:
            run_initialize(LinkedinMediaType.IMAGE)

        assert exc_info.value.status == 403
        assert exc_info.value.code == "LINKEDIN_API_ERROR_FAILED_IMAGE_UPLOAD_INIT"
        assert exc_info.value.data["message"] == "Not enough permissions"

    def test_missing_value(self, httpx_mock: HTTPXMock):
        """A success without ``value`` is an init failure."""
        httpx_mock.add_response(
            method="POST", url=init_url(LinkedinMediaType.DOCUMENT), json={"unexpected": True}
        )

        with pytest.raises(UploadInitError) as exc_info:
            run_initialize(LinkedinMediaType.DOCUMENT)

        assert exc_info.value.media_type == "document"

    def test_video_without_instructions(self, httpx_mock: HTTPXMock):
        """A video response without upload instructions is an init failure."""
        httpx_mock.add_response(
            method="POST",
            url=init_url(LinkedinMediaType.VIDEO),
            json={"value": {"video": "urn:li:video:1", "uploadInstructions": []}},
        )

        with pytest.raises(UploadInitError) as exc_info:
            run_initialize(LinkedinMediaType.VIDEO, file_size_bytes=10)

        assert exc_info.value.code == "LINKEDIN_API_ERROR_FAILED_VIDEO_UPLOAD_INIT"
