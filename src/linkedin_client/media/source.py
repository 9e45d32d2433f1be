"""
Media source loading.

Uploads accept raw bytes, a local file path, or an http(s) URL to
download first. Every source is normalised into ``bytes`` before the
upload starts.
"""

import asyncio
import os
from pathlib import Path
from typing import Union

import httpx

from ..exceptions import DownloadMediaError
from ..transport import LinkedinTransport

MediaSource = Union[bytes, bytearray, memoryview, str, os.PathLike]


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def load_media(source: MediaSource, transport: LinkedinTransport) -> bytes:
    """
    Read a media source into memory.

    Args:
        source: Bytes-like object, local path, or http(s) URL
        transport: Transport used to download remote sources

    Returns:
        The media payload

    Raises:
        DownloadMediaError: If the source can not be read or downloaded,
                            or is of an unsupported type
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    if isinstance(source, str) and _is_remote(source):
        return await _download(source, transport)

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        try:
            payload = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            transport.logger.error(f"Failed to read media file {path}: {e}")
            raise DownloadMediaError(
                f"Failed to read media file {path}: {e}",
                code="FAILED_READ_MEDIA",
                data={"path": str(path)},
            ) from e
        transport.logger.debug(f"Read {len(payload)} bytes from {path}")
        return payload

    raise DownloadMediaError(
        f"Invalid source type {type(source).__name__}",
        code="INVALID_SOURCE_TYPE",
        data={"source_type": type(source).__name__},
    )


async def _download(url: str, transport: LinkedinTransport) -> bytes:
    response: httpx.Response = await transport.request("GET", url)

    if not response.is_success:
        transport.logger.error(f"Failed to download media {response.status_code} {response.text}")
        raise DownloadMediaError(
            f"Failed to download media {response.status_code}",
            code="FAILED_DOWNLOAD_MEDIA",
            data={"url": url},
            status=response.status_code,
        )

    transport.logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
    return response.content
