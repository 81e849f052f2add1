"""
Content Element Models

Pydantic v2 models for the flat, section-tagged stream that sits between
extraction and pagination. Mirrors the JSON Schema in schemas/content.schema.json.
"""

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import jsonschema
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .schemas import load_content_schema


class ElementType(str, Enum):
    """Role of a content element in the stream."""
    SECTION_TITLE = "SECTION_TITLE"
    DOCUMENT_TITLE = "DOCUMENT_TITLE"
    HEADING_1 = "HEADING_1"
    HEADING_2 = "HEADING_2"
    HEADING_3 = "HEADING_3"
    PARAGRAPH = "PARAGRAPH"
    TABLE = "TABLE"
    IMAGE = "IMAGE"


HEADING_TYPES = frozenset({ElementType.HEADING_1, ElementType.HEADING_2, ElementType.HEADING_3})

TEXT_TYPES = frozenset({ElementType.PARAGRAPH, ElementType.DOCUMENT_TITLE}) | HEADING_TYPES


class ContentElement(BaseModel):
    """A single unit of content produced by extraction."""
    model_config = ConfigDict(frozen=True)

    type: ElementType
    text: str = ""
    image_reference: Optional[str] = None
    table_data: List[List[str]] = Field(default_factory=list)
    section_level: int = Field(0, ge=0)

    # Layout hints in points; informational only
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @field_validator("text", mode="before")
    @classmethod
    def text_never_null(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @model_validator(mode="after")
    def image_reference_only_on_images(self) -> "ContentElement":
        if self.image_reference is not None and self.type != ElementType.IMAGE:
            raise ValueError(
                f"image_reference is only allowed on IMAGE elements, got '{self.type.value}'"
            )
        return self

    @property
    def row_count(self) -> int:
        return len(self.table_data)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.table_data), default=0)

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def is_heading(self) -> bool:
        return self.type in HEADING_TYPES

    @property
    def is_section(self) -> bool:
        return self.type == ElementType.SECTION_TITLE

    @property
    def is_text(self) -> bool:
        return self.type in TEXT_TYPES

    def with_section_level(self, level: int) -> "ContentElement":
        """Return a copy tagged with another section level."""
        return self.model_copy(update={"section_level": level})

    def describe(self) -> str:
        """One-line rendering used by logs and the inspect command."""
        if self.type == ElementType.IMAGE:
            return f"[IMAGE] {self.image_reference}"
        if self.type == ElementType.TABLE:
            return f"[TABLE] {self.row_count}x{self.column_count}"
        if self.type == ElementType.SECTION_TITLE:
            return f"[SECTION {self.section_level + 1}] {self.text}"
        return f"[{self.type.value}] {self.text}"


class ContentStream(BaseModel):
    """An ordered element stream for one source document."""
    version: str = "1.0"
    source_id: str = ""
    title: str = ""
    elements: List[ContentElement] = Field(min_length=1)

    @property
    def section_count(self) -> int:
        return sum(1 for e in self.elements if e.is_section)


# ============================================================
# SERIALIZATION
# ============================================================

def save_content_stream(stream: ContentStream, path: Union[str, Path]) -> None:
    """Save a ContentStream to a JSON file."""
    path = Path(path)
    data = stream.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_content_stream(path: Union[str, Path]) -> ContentStream:
    """Load a ContentStream from a JSON file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return ContentStream(**data)


# ============================================================
# VALIDATION
# ============================================================

def validate_content_json(path: Union[str, Path]) -> List[str]:
    """Validate a content JSON file and return a list of error strings.

    Checks the file against the JSON Schema first, then against the
    Pydantic models for rules the schema cannot express.
    Returns an empty list when the stream is valid.
    """
    path = Path(path)
    errors: List[str] = []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        return [f"Invalid JSON: {exc}"]
    except FileNotFoundError:
        return [f"File not found: {path}"]

    validator = jsonschema.Draft202012Validator(load_content_schema())
    for error in validator.iter_errors(data):
        json_path = " -> ".join(str(p) for p in error.absolute_path) if error.absolute_path else "(root)"
        errors.append(f"{json_path}: {error.message}")
    if errors:
        return errors

    try:
        ContentStream(**data)
    except ValidationError as exc:
        errors.append(str(exc))

    return errors
