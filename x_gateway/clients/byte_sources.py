"""
Byte retrieval collaborators used by the media service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import requests

from x_gateway.exceptions import DownloadFailed, SourceNotFound

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TIMEOUT = 30.0


class FileByteSource:
    """Reads media bytes from the local filesystem."""

    def read(self, path: str) -> bytes:
        resolved = Path(path).expanduser()
        if not resolved.exists() or not resolved.is_file():
            raise SourceNotFound(f"File not found: {path}", upstream_code="file_not_found", upstream_status=404)
        return resolved.read_bytes()


@dataclass(slots=True)
class HttpByteSource:
    """Downloads media bytes over HTTP(S)."""

    session: requests.Session = field(default_factory=requests.Session)
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT

    def fetch(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Download of %s failed: %s", url, exc)
            raise DownloadFailed(
                f"Failed to download file: {exc}",
                upstream_code="download_failed",
            ) from exc

        if not 200 <= response.status_code < 300:
            raise DownloadFailed(
                f"Failed to download file: {response.status_code}",
                upstream_code="download_failed",
                upstream_status=response.status_code,
            )
        return response.content
