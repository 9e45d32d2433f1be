"""Single-request upload for images and documents."""

from typing import Any

from ..exceptions import LinkedinAPIError
from ..transport import LinkedinTransport, response_body


async def upload_single(
    transport: LinkedinTransport, upload_url: str, payload: bytes, access_token: Any
) -> bool:
    """
    PUT a whole image or document payload to its upload URL.

    Args:
        transport: HTTP transport
        upload_url: URL returned by initializeUpload
        payload: File bytes
        access_token: Bearer token

    Returns:
        True once LinkedIn accepted the bytes

    Raises:
        LinkedinAPIError: If the upload is rejected
    """
    headers = transport.api_headers(access_token, "application/octet-stream")
    headers["Content-Length"] = str(len(payload))

    transport.logger.info(f"Uploading {len(payload)} bytes to {upload_url}")
    response = await transport.request("PUT", upload_url, headers=headers, content=payload)
    transport.logger.info(f"Uploaded {len(payload)} bytes -> {response.status_code}")

    if not response.is_success:
        body = response_body(response)
        transport.logger.error(f"Failed to upload asset {response.status_code} {body}")
        raise LinkedinAPIError(
            "Failed to upload image or document",
            data=body,
            status=response.status_code,
            code="FAILED_IMAGE_OR_DOCUMENT_UPLOAD",
        )

    return True
