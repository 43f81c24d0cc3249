from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path

import pytest

from x_gateway.exceptions import (
    DownloadFailed,
    InvalidRequest,
    PermissionDenied,
    RateLimitExceeded,
    SourceNotFound,
)
from x_gateway.integrations.schema import (
    InlineBase64Source,
    LocalPathSource,
    MediaSource,
    RemoteUrlSource,
)
from x_gateway.rate_limit import MEDIA_UPLOAD, RateLimiter
from x_gateway.services.media_service import (
    IMAGE_MAX_BYTES,
    MediaService,
    kind_from_extension,
    sniff_kind,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\0" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\0" * 32
GIF_BYTES = b"GIF89a" + b"\0" * 32
MP4_BYTES = b"\0\0\0\x18ftypmp42" + b"\0" * 32


class FakeMediaClient:
    def __init__(self, *, upload_response: object | None = None) -> None:
        self.upload_calls: list[dict[str, object]] = []
        self.metadata_calls: list[tuple[str, str]] = []
        self.upload_response = upload_response or {"media_id": 710511363345354753, "media_id_string": "710511363345354753"}
        self.metadata_error: Exception | None = None

    def upload_media(self, *, data: bytes, kind: str):
        self.upload_calls.append({"data": data, "kind": kind})
        return self.upload_response

    def create_media_metadata(self, media_id: str, alt_text: str):
        self.metadata_calls.append((media_id, alt_text))
        if self.metadata_error:
            raise self.metadata_error
        return None


class FakeFetcher:
    def __init__(self, payload: bytes | Exception) -> None:
        self.payload = payload
        self.urls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


# ============================================================================
# Kind detection
# ============================================================================


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (JPEG_BYTES, "image"),
        (PNG_BYTES, "image"),
        (GIF_BYTES, "gif"),
        (b"GIF87a" + b"\0" * 8, "gif"),
        (MP4_BYTES, "video"),
        (b"plain text", None),
        (b"", None),
    ],
)
def test_sniff_kind(data: bytes, expected: str | None) -> None:
    assert sniff_kind(data) == expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("photo.JPG", "image"),
        ("clip.mp4", "video"),
        ("clip.mov", "video"),
        ("anim.gif", "image"),
        ("notes.txt", None),
    ],
)
def test_kind_from_extension(path: str, expected: str | None) -> None:
    assert kind_from_extension(path) == expected


def test_mp4_path_is_video_regardless_of_content(tmp_path: Path) -> None:
    file_path = tmp_path / "clip.mp4"
    file_path.write_bytes(JPEG_BYTES)
    service = MediaService(FakeMediaClient())

    media = asyncio.run(service.resolve(MediaSource(LocalPathSource(str(file_path)))))

    assert media.kind == "video"
    assert media.data == JPEG_BYTES


def test_buffer_sources_are_sniffed() -> None:
    service = MediaService(FakeMediaClient(), http=FakeFetcher(MP4_BYTES))

    from_url = asyncio.run(service.resolve(MediaSource(RemoteUrlSource("https://example.com/v"))))
    from_b64 = asyncio.run(service.resolve(MediaSource(InlineBase64Source(_b64(GIF_BYTES)))))

    assert from_url.kind == "video"
    assert from_b64.kind == "gif"
    assert from_b64.size == len(GIF_BYTES)


def test_declared_kind_wins_over_detection() -> None:
    service = MediaService(FakeMediaClient())
    source = MediaSource(InlineBase64Source(_b64(JPEG_BYTES)), declared_kind="gif")

    assert asyncio.run(service.resolve(source)).kind == "gif"


def test_unrecognized_bytes_default_to_image() -> None:
    service = MediaService(FakeMediaClient())
    source = MediaSource(InlineBase64Source(_b64(b"mystery bytes")))

    assert asyncio.run(service.resolve(source)).kind == "image"


# ============================================================================
# Source failures
# ============================================================================


def test_missing_path_raises_source_not_found(tmp_path: Path) -> None:
    client = FakeMediaClient()
    service = MediaService(client)

    with pytest.raises(SourceNotFound, match="File not found"):
        asyncio.run(service.upload(MediaSource(LocalPathSource(str(tmp_path / "missing.png")))))

    assert client.upload_calls == []


def test_download_failure_propagates() -> None:
    failure = DownloadFailed("Failed to download file: 404", upstream_status=404)
    service = MediaService(FakeMediaClient(), http=FakeFetcher(failure))

    with pytest.raises(DownloadFailed) as exc_info:
        asyncio.run(service.upload(MediaSource(RemoteUrlSource("https://example.com/gone.png"))))

    assert exc_info.value.upstream_status == 404


def test_malformed_base64_is_invalid_input() -> None:
    service = MediaService(FakeMediaClient())

    with pytest.raises(InvalidRequest, match="Malformed base64"):
        asyncio.run(service.resolve(MediaSource(InlineBase64Source("not base64!!"))))


def test_line_wrapped_base64_is_accepted() -> None:
    service = MediaService(FakeMediaClient())
    payload = JPEG_BYTES + b"\x01" * 120
    wrapped = base64.encodebytes(payload).decode("ascii")

    resolved = asyncio.run(service.resolve(MediaSource(InlineBase64Source(wrapped))))

    assert "\n" in wrapped
    assert resolved.data == payload
    assert resolved.kind == "image"


def test_oversized_image_is_rejected() -> None:
    client = FakeMediaClient()
    service = MediaService(client)
    payload = JPEG_BYTES + b"\0" * IMAGE_MAX_BYTES

    with pytest.raises(InvalidRequest, match="size limit"):
        asyncio.run(service.upload(MediaSource(InlineBase64Source(_b64(payload)))))

    assert client.upload_calls == []


# ============================================================================
# Upload
# ============================================================================


def test_upload_returns_id_size_and_kind() -> None:
    client = FakeMediaClient()
    service = MediaService(client)

    result = asyncio.run(service.upload(MediaSource(InlineBase64Source(_b64(PNG_BYTES)))))

    assert result.media_id == "710511363345354753"
    assert result.size == len(PNG_BYTES)
    assert result.kind == "image"
    assert client.upload_calls == [{"data": PNG_BYTES, "kind": "image"}]
    assert client.metadata_calls == []


def test_alt_text_is_attached() -> None:
    client = FakeMediaClient()
    service = MediaService(client)
    source = MediaSource(InlineBase64Source(_b64(PNG_BYTES)), alt_text="A sunset")

    asyncio.run(service.upload(source))

    assert client.metadata_calls == [("710511363345354753", "A sunset")]


def test_alt_text_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    client = FakeMediaClient()
    client.metadata_error = RuntimeError("metadata endpoint down")
    service = MediaService(client)
    source = MediaSource(InlineBase64Source(_b64(PNG_BYTES)), alt_text="A sunset")

    with caplog.at_level(logging.WARNING, logger="x_gateway.services.media_service"):
        result = asyncio.run(service.upload(source))

    assert result.media_id == "710511363345354753"
    assert "Failed to add alt text" in caplog.text


def test_upload_is_admitted_by_rate_limiter() -> None:
    client = FakeMediaClient()
    limiter = RateLimiter(threshold=1)
    service = MediaService(client, limiter=limiter)
    source = MediaSource(InlineBase64Source(_b64(PNG_BYTES)))

    asyncio.run(service.upload(source))

    assert limiter.snapshot(MEDIA_UPLOAD).count == 1
    with pytest.raises(RateLimitExceeded):
        asyncio.run(service.upload(source))
    assert len(client.upload_calls) == 1


def test_upload_failure_is_normalized() -> None:
    class Forbidden(Exception):
        def __init__(self) -> None:
            super().__init__("403 Forbidden")
            self.api_codes = [324]
            self.response = type("Response", (), {"status_code": 403, "headers": {}})()

    class FailingClient(FakeMediaClient):
        def upload_media(self, *, data: bytes, kind: str):
            raise Forbidden()

    service = MediaService(FailingClient())

    with pytest.raises(PermissionDenied) as exc_info:
        asyncio.run(service.upload(MediaSource(InlineBase64Source(_b64(PNG_BYTES)))))

    assert exc_info.value.upstream_code == 324
