"""
Destination Writers

The pipeline talks to the destination through declarative operations
grouped into batches. Slide creation does not hand back the ids of the
placeholders it creates, so a writer exposes resolve_placeholders() to look
them up after the create-slide batch has been applied.

PptxDestinationWriter renders to a local .pptx with python-pptx;
MemoryDestinationWriter records batches for dry runs.
"""

import abc
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pptx import Presentation
from pptx.enum.shapes import PP_PLACEHOLDER
from pptx.exc import PackageNotFoundError
from pptx.util import Pt
from pydantic import BaseModel, Field

from .errors import ImageFetchError, WriteError
from .layout import BoxPosition, LayoutArchetype

logger = logging.getLogger(__name__)


# ============================================================
# OPERATIONS
# ============================================================

class CreateSlide(BaseModel):
    op: Literal["create_slide"] = "create_slide"
    object_id: str
    layout: LayoutArchetype


class InsertText(BaseModel):
    """Insert text into a placeholder or shape."""
    op: Literal["insert_text"] = "insert_text"
    object_id: str
    text: str


class CreateTable(BaseModel):
    op: Literal["create_table"] = "create_table"
    object_id: str
    slide_id: str
    rows: int = Field(ge=1)
    columns: int = Field(ge=1)
    box: Optional[BoxPosition] = None


class SetCellText(BaseModel):
    op: Literal["set_cell_text"] = "set_cell_text"
    table_id: str
    row: int = Field(ge=0)
    column: int = Field(ge=0)
    text: str


class CreateImage(BaseModel):
    op: Literal["create_image"] = "create_image"
    object_id: str
    slide_id: str
    uri: str
    box: BoxPosition
    data: Optional[bytes] = Field(None, repr=False)


class SetFontSize(BaseModel):
    """Set the font size of a shape, or of one table cell when row/column are set."""
    op: Literal["set_font_size"] = "set_font_size"
    object_id: str
    size_pt: float = Field(gt=0)
    row: Optional[int] = None
    column: Optional[int] = None


Operation = Annotated[
    Union[CreateSlide, InsertText, CreateTable, SetCellText, CreateImage, SetFontSize],
    Field(discriminator="op"),
]

Batch = List[Operation]


@dataclass
class SlidePlaceholders:
    """Placeholder ids of a created slide; None when the layout lacks one."""
    slide_id: str
    title_id: Optional[str] = None
    body_id: Optional[str] = None


@dataclass
class BatchResult:
    applied: int = 0
    created: List[str] = field(default_factory=list)


# ============================================================
# WRITER CONTRACT
# ============================================================

class DestinationWriter(abc.ABC):
    """Where slides go."""

    #: Images must arrive as bytes (CreateImage.data) rather than a fetchable URL
    requires_image_bytes: bool = False

    @abc.abstractmethod
    def create_presentation(self, title: str) -> str:
        """Create the destination deck; returns its id."""

    @abc.abstractmethod
    def apply(self, batch: Batch) -> BatchResult:
        """Apply a batch of operations in order."""

    @abc.abstractmethod
    def resolve_placeholders(self, slide_id: str) -> SlidePlaceholders:
        """Look up title/body placeholders of a slide created by an earlier batch."""

    @abc.abstractmethod
    def finish(self) -> str:
        """Finalize the deck; returns its location."""


# ============================================================
# PPTX
# ============================================================

TITLE_TYPES = (PP_PLACEHOLDER.TITLE, PP_PLACEHOLDER.CENTER_TITLE)
BODY_TYPES = (PP_PLACEHOLDER.BODY, PP_PLACEHOLDER.OBJECT)

# Layout names in the default python-pptx template, with index fallbacks
LAYOUT_NAMES = {
    LayoutArchetype.TITLE_AND_BODY: ("Title and Content", 1),
    LayoutArchetype.BLANK: ("Blank", 6),
}


class PptxDestinationWriter(DestinationWriter):
    """Write slides into a .pptx file with python-pptx."""

    requires_image_bytes = True

    def __init__(
        self,
        output_path: Union[str, Path],
        template: Optional[Union[str, Path]] = None,
        slide_width_pt: float = 720.0,
        slide_height_pt: float = 540.0,
    ):
        self.output_path = Path(output_path)
        self.template = Path(template) if template else None
        self.slide_width_pt = slide_width_pt
        self.slide_height_pt = slide_height_pt
        self.prs = None
        self.objects: Dict[str, Any] = {}
        self.slide_count = 0

    def create_presentation(self, title: str) -> str:
        try:
            if self.template is not None:
                self.prs = Presentation(str(self.template))
            else:
                self.prs = Presentation()
                self.prs.slide_width = Pt(self.slide_width_pt)
                self.prs.slide_height = Pt(self.slide_height_pt)
        except (OSError, PackageNotFoundError) as exc:
            raise WriteError(
                f"could not open template: {exc}",
                identifier=str(self.template),
            ) from exc

        self.prs.core_properties.title = title
        logger.info("Created presentation '%s'", title)
        return self.output_path.stem

    def apply(self, batch: Batch) -> BatchResult:
        if self.prs is None:
            raise WriteError("create_presentation() must be called first")

        result = BatchResult()
        for operation in batch:
            handler = getattr(self, f"_apply_{operation.op}")
            created = handler(operation)
            if created:
                result.created.append(created)
            result.applied += 1
        return result

    def resolve_placeholders(self, slide_id: str) -> SlidePlaceholders:
        slide = self._lookup(slide_id)
        found = SlidePlaceholders(slide_id=slide_id)
        for placeholder in slide.placeholders:
            ph_type = placeholder.placeholder_format.type
            if ph_type in TITLE_TYPES and found.title_id is None:
                found.title_id = f"{slide_id}_title"
                self.objects[found.title_id] = placeholder
            elif ph_type in BODY_TYPES and found.body_id is None:
                found.body_id = f"{slide_id}_body"
                self.objects[found.body_id] = placeholder
        return found

    def finish(self) -> str:
        if self.prs is None:
            raise WriteError("nothing to save; no presentation was created")
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.prs.save(str(self.output_path))
        except OSError as exc:
            raise WriteError(str(exc), identifier=str(self.output_path)) from exc
        logger.info("Saved %d slides to %s", self.slide_count, self.output_path)
        return str(self.output_path)

    # ------------------------------------------------------------

    def _lookup(self, object_id: str) -> Any:
        try:
            return self.objects[object_id]
        except KeyError:
            raise WriteError("unknown object id", identifier=object_id) from None

    def _slide_layout(self, archetype: LayoutArchetype):
        name, index = LAYOUT_NAMES[archetype]
        for layout in self.prs.slide_layouts:
            if layout.name == name:
                return layout
        return self.prs.slide_layouts[index]

    def _apply_create_slide(self, op: CreateSlide) -> str:
        slide = self.prs.slides.add_slide(self._slide_layout(op.layout))
        self.objects[op.object_id] = slide
        self.slide_count += 1
        return op.object_id

    def _apply_insert_text(self, op: InsertText) -> None:
        shape = self._lookup(op.object_id)
        if not getattr(shape, "has_text_frame", False):
            raise WriteError("object has no text frame", identifier=op.object_id)
        shape.text_frame.text = op.text

    def _apply_create_table(self, op: CreateTable) -> str:
        slide = self._lookup(op.slide_id)
        box = op.box or BoxPosition(x=36.0, y=36.0, width=self.slide_width_pt - 72.0,
                                    height=self.slide_height_pt - 72.0)
        frame = slide.shapes.add_table(
            op.rows, op.columns, Pt(box.x), Pt(box.y), Pt(box.width), Pt(box.height)
        )
        self.objects[op.object_id] = frame.table
        return op.object_id

    def _apply_set_cell_text(self, op: SetCellText) -> None:
        table = self._lookup(op.table_id)
        table.cell(op.row, op.column).text = op.text

    def _apply_create_image(self, op: CreateImage) -> str:
        slide = self._lookup(op.slide_id)
        if op.data is None:
            raise WriteError("pptx output needs image bytes", identifier=op.uri)

        box = op.box
        try:
            picture = slide.shapes.add_picture(
                io.BytesIO(op.data),
                Pt(box.x),
                Pt(box.y),
                width=Pt(box.width) if box.width else None,
                height=Pt(box.height) if box.height else None,
            )
        except (OSError, ValueError) as exc:
            raise ImageFetchError(f"unreadable image data: {exc}", identifier=op.uri) from exc
        self.objects[op.object_id] = picture
        return op.object_id

    def _apply_set_font_size(self, op: SetFontSize) -> None:
        target = self._lookup(op.object_id)
        if op.row is not None and op.column is not None:
            text_frame = target.cell(op.row, op.column).text_frame
        else:
            text_frame = target.text_frame

        size = Pt(op.size_pt)
        for paragraph in text_frame.paragraphs:
            paragraph.font.size = size
            for run in paragraph.runs:
                run.font.size = size


# ============================================================
# IN-MEMORY
# ============================================================

class MemoryDestinationWriter(DestinationWriter):
    """Record batches without rendering anything.

    Every TITLE_AND_BODY slide gets title and body placeholders; BLANK
    slides get none.
    """

    def __init__(self, requires_image_bytes: bool = False):
        self.requires_image_bytes = requires_image_bytes
        self.title = ""
        self.batches: List[Batch] = []
        self.slides: Dict[str, LayoutArchetype] = {}
        self.finished = False

    @property
    def operations(self) -> List[Operation]:
        return [op for batch in self.batches for op in batch]

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    def create_presentation(self, title: str) -> str:
        self.title = title
        return "memory"

    def apply(self, batch: Batch) -> BatchResult:
        result = BatchResult()
        for operation in batch:
            if isinstance(operation, CreateSlide):
                self.slides[operation.object_id] = operation.layout
                result.created.append(operation.object_id)
            result.applied += 1
        self.batches.append(list(batch))
        return result

    def resolve_placeholders(self, slide_id: str) -> SlidePlaceholders:
        layout = self.slides.get(slide_id)
        if layout is None:
            raise WriteError("unknown object id", identifier=slide_id)
        if layout == LayoutArchetype.BLANK:
            return SlidePlaceholders(slide_id=slide_id)
        return SlidePlaceholders(slide_id=slide_id, title_id=f"{slide_id}_title", body_id=f"{slide_id}_body")

    def finish(self) -> str:
        self.finished = True
        return "memory"
