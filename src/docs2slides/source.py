"""
Source Document Model

Pydantic models for the hierarchical source document, shaped after the
Google Docs API `documents.get` JSON (with tab content included). Readers
for other formats build the same model so extraction has one input shape.

Unknown fields are ignored; only the parts extraction needs are modelled.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ImageResolutionError


class SourceModel(BaseModel):
    """Base for all source nodes: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ============================================================
# INLINE OBJECTS
# ============================================================

EMU_PER_PT = 12700


class Dimension(SourceModel):
    magnitude: float = 0.0
    unit: str = ""

    def to_points(self) -> float:
        """Convert to points.

        PT is taken as is, EMU divided by 12700. Unitless magnitudes are
        micro-inches, as returned for embedded object sizes.
        """
        unit = self.unit.upper()
        if unit == "PT":
            return self.magnitude
        if unit == "EMU":
            return self.magnitude / EMU_PER_PT
        return self.magnitude * 72.0 / 1_000_000.0


class Size(SourceModel):
    width: Optional[Dimension] = None
    height: Optional[Dimension] = None


class ImageProperties(SourceModel):
    content_uri: Optional[str] = None
    source_uri: Optional[str] = None


class EmbeddedObject(SourceModel):
    title: str = ""
    description: str = ""
    image_properties: Optional[ImageProperties] = None
    size: Optional[Size] = None


class InlineObjectProperties(SourceModel):
    embedded_object: Optional[EmbeddedObject] = None


class InlineObject(SourceModel):
    object_id: str = ""
    inline_object_properties: Optional[InlineObjectProperties] = None


# ============================================================
# BODY STRUCTURE
# ============================================================

class TextRun(SourceModel):
    content: Optional[str] = None


class InlineObjectElement(SourceModel):
    inline_object_id: str


class ParagraphElement(SourceModel):
    text_run: Optional[TextRun] = None
    inline_object_element: Optional[InlineObjectElement] = None
    page_break: Optional[Dict[str, Any]] = None


class ParagraphStyle(SourceModel):
    named_style_type: Optional[str] = None


class Paragraph(SourceModel):
    elements: List[ParagraphElement] = Field(default_factory=list)
    paragraph_style: Optional[ParagraphStyle] = None

    @property
    def style_name(self) -> str:
        if self.paragraph_style is None:
            return ""
        return self.paragraph_style.named_style_type or ""

    @property
    def text(self) -> str:
        """All text runs concatenated, untrimmed."""
        return "".join(
            pe.text_run.content
            for pe in self.elements
            if pe.text_run is not None and pe.text_run.content is not None
        )

    @property
    def inline_object_ids(self) -> List[str]:
        return [
            pe.inline_object_element.inline_object_id
            for pe in self.elements
            if pe.inline_object_element is not None
        ]

    @property
    def has_page_break(self) -> bool:
        return any(pe.page_break is not None for pe in self.elements)


class TableCell(SourceModel):
    content: List["StructuralElement"] = Field(default_factory=list)


class TableRow(SourceModel):
    table_cells: List[TableCell] = Field(default_factory=list)


class Table(SourceModel):
    rows: int = 0
    columns: int = 0
    table_rows: List[TableRow] = Field(default_factory=list)


class StructuralElement(SourceModel):
    paragraph: Optional[Paragraph] = None
    table: Optional[Table] = None
    section_break: Optional[Dict[str, Any]] = None
    table_of_contents: Optional[Dict[str, Any]] = None


for _model in (TableCell, TableRow, Table, StructuralElement):
    _model.model_rebuild()


class Body(SourceModel):
    content: List[StructuralElement] = Field(default_factory=list)


# ============================================================
# TABS / DOCUMENT
# ============================================================

class TabProperties(SourceModel):
    tab_id: str = ""
    title: str = ""
    index: int = 0
    nesting_level: int = 0


class DocumentTab(SourceModel):
    body: Optional[Body] = None
    inline_objects: Optional[Dict[str, InlineObject]] = None


class Tab(SourceModel):
    tab_properties: TabProperties = Field(default_factory=TabProperties)
    document_tab: Optional[DocumentTab] = None
    child_tabs: List["Tab"] = Field(default_factory=list)


Tab.model_rebuild()


class Document(SourceModel):
    document_id: str = ""
    title: str = ""
    tabs: List[Tab] = Field(default_factory=list)
    body: Optional[Body] = None
    inline_objects: Optional[Dict[str, InlineObject]] = None


# ============================================================
# IMAGE RESOLVER
# ============================================================

@dataclass
class ResolvedImage:
    """An inline image reference resolved to something fetchable."""
    object_id: str
    uri: str
    width_pt: float
    height_pt: float


class InlineObjectResolver:
    """Resolve inline object ids against one tab's (or document's) object map.

    Every failure raises ImageResolutionError with a code naming what was
    missing; callers skip the image and keep going.
    """

    def __init__(self, inline_objects: Optional[Dict[str, InlineObject]]):
        self.inline_objects = inline_objects

    def resolve(self, inline_object_id: str) -> ResolvedImage:
        if self.inline_objects is None:
            raise ImageResolutionError(
                "no inline object map for this body",
                identifier=inline_object_id,
                code="IMG-001",
            )

        inline_object = self.inline_objects.get(inline_object_id)
        if inline_object is None:
            raise ImageResolutionError(
                "inline object not found",
                identifier=inline_object_id,
                code="IMG-001",
            )

        props = inline_object.inline_object_properties
        embedded = props.embedded_object if props is not None else None
        if embedded is None:
            raise ImageResolutionError(
                "no embedded object",
                identifier=inline_object_id,
                code="IMG-002",
            )

        image_props = embedded.image_properties
        uri = None
        if image_props is not None:
            uri = image_props.content_uri or image_props.source_uri
        if not uri:
            raise ImageResolutionError(
                "no image properties",
                identifier=inline_object_id,
                code="IMG-002",
            )

        size = embedded.size
        if size is None or size.width is None or size.height is None:
            raise ImageResolutionError(
                "image size not available",
                identifier=inline_object_id,
                code="IMG-003",
            )

        return ResolvedImage(
            object_id=inline_object_id,
            uri=uri,
            width_pt=size.width.to_points(),
            height_pt=size.height.to_points(),
        )
