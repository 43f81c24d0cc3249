"""
Media resolution and upload workflows.

A ``MediaSource`` names exactly one of a local path, a remote URL, or inline
base64 data. The service turns it into bytes with a detected kind and hands
the bytes to the upload client.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Protocol

from x_gateway.clients.byte_sources import FileByteSource, HttpByteSource
from x_gateway.errors import normalize_error
from x_gateway.exceptions import InvalidRequest
from x_gateway.integrations.schema import (
    InlineBase64Source,
    LocalPathSource,
    MediaSource,
    RemoteUrlSource,
)
from x_gateway.models import MediaKind, MediaUploadResult, ResolvedMedia
from x_gateway.rate_limit import MEDIA_UPLOAD, RateLimiter

logger = logging.getLogger(__name__)

IMAGE_MAX_BYTES = 5 * 1024 * 1024
GIF_MAX_BYTES = 15 * 1024 * 1024
VIDEO_MAX_BYTES = 512 * 1024 * 1024
MAX_BYTES: dict[str, int] = {
    "image": IMAGE_MAX_BYTES,
    "gif": GIF_MAX_BYTES,
    "video": VIDEO_MAX_BYTES,
}

EXTENSION_KINDS: dict[str, MediaKind] = {
    ".jpg": "image",
    ".jpeg": "image",
    ".png": "image",
    ".gif": "image",
    ".webp": "image",
    ".mp4": "video",
    ".mov": "video",
    ".m4v": "video",
}


class MediaClient(Protocol):
    """Protocol capturing media upload behaviour from client adapters."""

    def upload_media(self, *, data: bytes, kind: MediaKind) -> Any:
        ...

    def create_media_metadata(self, media_id: str, alt_text: str) -> Any:
        ...


class PathReader(Protocol):
    def read(self, path: str) -> bytes:
        ...


class UrlFetcher(Protocol):
    def fetch(self, url: str) -> bytes:
        ...


def kind_from_extension(path: str) -> MediaKind | None:
    return EXTENSION_KINDS.get(PurePath(path).suffix.lower())


def sniff_kind(data: bytes) -> MediaKind | None:
    """Detect the media kind from leading magic bytes."""
    if data[:2] == b"\xff\xd8":
        return "image"
    if data[:2] == b"\x89\x50":
        return "image"
    if data[:6] in (b"GIF89a", b"GIF87a"):
        return "gif"
    if data[4:8] == b"ftyp":
        return "video"
    return None


def decode_base64(data: str) -> bytes:
    # MIME encoders wrap lines; whitespace is not part of the payload.
    compact = "".join(data.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidRequest(f"Malformed base64 media data: {exc}", upstream_code="invalid_input") from exc


@dataclass(slots=True)
class MediaService:
    """High level media resolution and upload orchestration."""

    client: MediaClient
    limiter: RateLimiter = field(default_factory=RateLimiter)
    files: PathReader = field(default_factory=FileByteSource)
    http: UrlFetcher = field(default_factory=HttpByteSource)

    async def resolve(self, source: MediaSource) -> ResolvedMedia:
        """
        Read the bytes named by ``source`` and settle their kind.

        Kind priority: declared kind, then file extension for path sources,
        then magic bytes for buffer sources, then ``image``.

        Raises:
            SourceNotFound: the local path does not exist.
            DownloadFailed: the URL answered non-2xx or could not be reached.
            InvalidRequest: the inline data is not valid base64.
        """
        locator = source.locator
        detected: MediaKind | None
        if isinstance(locator, LocalPathSource):
            data = await asyncio.to_thread(self.files.read, locator.path)
            detected = kind_from_extension(locator.path)
        elif isinstance(locator, RemoteUrlSource):
            data = await asyncio.to_thread(self.http.fetch, locator.url)
            detected = sniff_kind(data)
        elif isinstance(locator, InlineBase64Source):
            data = decode_base64(locator.data)
            detected = sniff_kind(data)
        else:
            raise InvalidRequest("No media file provided", upstream_code="invalid_input")

        kind: MediaKind = source.declared_kind or detected or "image"
        return ResolvedMedia(data=data, kind=kind)

    async def upload(self, source: MediaSource) -> MediaUploadResult:
        """
        Resolve ``source`` and upload it, attaching alt text when given.

        The alt text call is best effort: its failure is logged and the
        upload result is still returned.
        """
        self.limiter.admit(MEDIA_UPLOAD)
        media = await self.resolve(source)
        self._validate_size(media)

        try:
            response = await asyncio.to_thread(self.client.upload_media, data=media.data, kind=media.kind)
        except Exception as exc:
            raise normalize_error(exc) from exc

        result = MediaUploadResult.from_api(response, size=media.size, kind=media.kind)
        logger.info("Media uploaded successfully with ID: %s (%s, %d bytes)", result.media_id, media.kind, media.size)

        if source.alt_text:
            await self._attach_alt_text(result.media_id, source.alt_text)
        return result

    async def _attach_alt_text(self, media_id: str, alt_text: str) -> None:
        try:
            await asyncio.to_thread(self.client.create_media_metadata, media_id, alt_text)
        except Exception as exc:
            error = normalize_error(exc)
            logger.warning("Failed to add alt text to media %s: %s", media_id, error.message)

    @staticmethod
    def _validate_size(media: ResolvedMedia) -> None:
        if media.size == 0:
            raise InvalidRequest("Media data is empty.", upstream_code="invalid_input")
        limit = MAX_BYTES[media.kind]
        if media.size > limit:
            raise InvalidRequest(
                f"{media.kind.capitalize()} exceeds the {limit} byte size limit ({media.size} bytes).",
                upstream_code="invalid_input",
            )
