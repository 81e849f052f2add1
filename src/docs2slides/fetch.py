"""
Image Fetching

Downloads image bytes for destinations that cannot fetch a URL themselves.
HTTP(S) goes through requests with a size cap; file:// URIs and plain paths
are read from disk. Every failure surfaces as ImageFetchError so the caller
can skip the image and carry on.
"""

import logging
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import ImageFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 30
DEFAULT_MAX_BYTES = 25 * 1024 * 1024


class ImageFetcher:
    """Fetch image bytes by URI."""

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT_SEC,
        max_bytes: int = DEFAULT_MAX_BYTES,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.headers = headers or {}
        self.session = session or requests.Session()

    def download(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        if parsed.scheme in ("http", "https"):
            return self._download_http(uri)
        if parsed.scheme == "file":
            return self._read_file(Path(unquote(parsed.path)), uri)
        if parsed.scheme == "" or len(parsed.scheme) == 1:
            # Plain path (a one-letter scheme is a Windows drive)
            return self._read_file(Path(uri), uri)
        raise ImageFetchError(f"unsupported URI scheme '{parsed.scheme}'", identifier=uri)

    def _download_http(self, uri: str) -> bytes:
        try:
            with self.session.get(uri, stream=True, timeout=self.timeout, headers=self.headers) as r:
                r.raise_for_status()
                data = bytearray()
                for chunk in r.iter_content(1024 * 64):
                    if not chunk:
                        continue
                    data.extend(chunk)
                    if len(data) > self.max_bytes:
                        raise ImageFetchError(
                            f"image larger than {self.max_bytes} bytes",
                            identifier=uri,
                        )
        except requests.RequestException as exc:
            raise ImageFetchError(str(exc), identifier=uri) from exc

        logger.debug("Downloaded image from %s, size: %d bytes", uri, len(data))
        return bytes(data)

    def _read_file(self, path: Path, uri: str) -> bytes:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ImageFetchError(str(exc), identifier=uri) from exc
        if len(data) > self.max_bytes:
            raise ImageFetchError(f"image larger than {self.max_bytes} bytes", identifier=uri)
        return data
