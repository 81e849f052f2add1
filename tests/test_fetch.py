"""Tests for image downloading."""

import pytest
import requests

from docs2slides.errors import ImageFetchError
from docs2slides.fetch import ImageFetcher

from docs_builders import PNG_BYTES


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_content(self, chunk_size):
        return iter(self.chunks)


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


# ============================================================
# LOCAL FILES
# ============================================================

def test_read_plain_path(tmp_path):
    path = tmp_path / "a.png"
    path.write_bytes(PNG_BYTES)
    assert ImageFetcher().download(str(path)) == PNG_BYTES


def test_read_file_uri(tmp_path):
    path = tmp_path / "a.png"
    path.write_bytes(PNG_BYTES)
    assert ImageFetcher().download(path.as_uri()) == PNG_BYTES


def test_missing_file():
    with pytest.raises(ImageFetchError) as exc_info:
        ImageFetcher().download("/nonexistent/image.png")
    assert exc_info.value.code == "IMG-004"
    assert exc_info.value.identifier == "/nonexistent/image.png"


def test_local_file_too_large(tmp_path):
    path = tmp_path / "big.bin"
    path.write_bytes(b"x" * 100)
    with pytest.raises(ImageFetchError):
        ImageFetcher(max_bytes=10).download(str(path))


def test_unsupported_scheme():
    with pytest.raises(ImageFetchError):
        ImageFetcher().download("ftp://example.com/a.png")


# ============================================================
# HTTP
# ============================================================

def test_http_download():
    session = FakeSession(FakeResponse([b"abc", b"", b"def"]))
    fetcher = ImageFetcher(session=session, timeout=5, headers={"Authorization": "Bearer t"})

    assert fetcher.download("https://example.com/a.png") == b"abcdef"
    url, kwargs = session.calls[0]
    assert url == "https://example.com/a.png"
    assert kwargs["stream"] is True
    assert kwargs["timeout"] == 5
    assert kwargs["headers"] == {"Authorization": "Bearer t"}


def test_http_error_status():
    session = FakeSession(FakeResponse([], status=404))
    with pytest.raises(ImageFetchError) as exc_info:
        ImageFetcher(session=session).download("https://example.com/missing.png")
    assert "404" in exc_info.value.detail


def test_http_connection_error():
    session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(ImageFetchError):
        ImageFetcher(session=session).download("http://example.com/a.png")


def test_http_size_cap():
    session = FakeSession(FakeResponse([b"x" * 8, b"x" * 8]))
    with pytest.raises(ImageFetchError) as exc_info:
        ImageFetcher(session=session, max_bytes=10).download("https://example.com/a.png")
    assert "larger than" in exc_info.value.detail
