"""
Error Taxonomy

Typed failures raised by the conversion pipeline. Fatal errors abort the run
and identify the stage (extraction, pagination, write) plus the offending
document or element. Recoverable errors cover a single element and are
turned into report entries by the caller.
"""

from typing import Any, Dict, Optional


class Docs2SlidesError(Exception):
    """Base class for all conversion errors."""

    stage: str = "conversion"
    default_code: str = "E_CONVERSION"

    def __init__(
        self,
        detail: str = "",
        *,
        stage: Optional[str] = None,
        identifier: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        if stage is not None:
            self.stage = stage
        self.identifier = identifier
        self.code = code or self.default_code

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error": type(self).__name__,
            "stage": self.stage,
            "code": self.code,
            "detail": self.detail,
        }
        if self.identifier is not None:
            data["identifier"] = self.identifier
        return data

    def __str__(self) -> str:
        where = f" [{self.identifier}]" if self.identifier else ""
        return f"{self.stage} failed ({self.code}){where}: {self.detail}"


# ============================================================
# FATAL
# ============================================================

class NotFoundError(Docs2SlidesError):
    """The source document does not exist."""
    stage = "extraction"
    default_code = "E_NOT_FOUND"


class AccessError(Docs2SlidesError):
    """The source document exists but cannot be read."""
    stage = "extraction"
    default_code = "E_ACCESS"


class MalformedSourceError(Docs2SlidesError):
    """The source document is null, has no body, or cannot be parsed."""
    stage = "extraction"
    default_code = "E_MALFORMED_SOURCE"


class PaginationError(Docs2SlidesError):
    """The paginator received input that extraction should never produce."""
    stage = "pagination"
    default_code = "E_PAGINATION"


class WriteError(Docs2SlidesError):
    """The destination writer could not create or update the presentation."""
    stage = "write"
    default_code = "E_WRITE"


class ConversionError(Docs2SlidesError):
    """Wraps any unexpected failure with the stage it happened in."""


# ============================================================
# RECOVERABLE (per element)
# ============================================================

class RecoverableError(Docs2SlidesError):
    """A failure confined to one element; the run continues without it."""


class ImageResolutionError(RecoverableError):
    """An inline image reference could not be resolved to an image."""
    stage = "extraction"
    default_code = "IMG-001"


class ImageFetchError(RecoverableError):
    """Image bytes could not be downloaded."""
    stage = "write"
    default_code = "IMG-004"
