"""
Source Readers

Turn a document handle into the source Document model.

- JsonSourceReader: a Google Docs API `documents.get` response saved as JSON
  (tabs included when it was fetched with includeTabsContent).
- DocxSourceReader: a Word .docx read with python-docx. Word files have no
  tab hierarchy, so the result has a root body and extraction falls back to
  section detection.
"""

import abc
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

import docx
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.enum.style import WD_STYLE_TYPE
from lxml import etree
from pydantic import ValidationError

from .errors import AccessError, MalformedSourceError, NotFoundError
from .source import (
    Body,
    Dimension,
    Document,
    EmbeddedObject,
    ImageProperties,
    InlineObject,
    InlineObjectElement,
    InlineObjectProperties,
    Paragraph,
    ParagraphElement,
    ParagraphStyle,
    Size,
    StructuralElement,
    Table,
    TableCell,
    TableRow,
    TextRun,
)

logger = logging.getLogger(__name__)


class SourceReader(abc.ABC):
    """Fetch a source document by handle."""

    @abc.abstractmethod
    def fetch(self, handle: Union[str, Path]) -> Document:
        """Return the root node; raise NotFoundError, AccessError or MalformedSourceError."""

    def close(self) -> None:
        """Release anything fetch() left on disk."""


def _check_readable(path: Path) -> None:
    if not path.exists():
        raise NotFoundError("source document not found", identifier=str(path))
    if not path.is_file():
        raise MalformedSourceError("source is not a file", identifier=str(path))
    if not os.access(path, os.R_OK):
        raise AccessError("source document is not readable", identifier=str(path))


# ============================================================
# GOOGLE DOCS JSON
# ============================================================

class JsonSourceReader(SourceReader):
    """Read a Google Docs API JSON export."""

    def fetch(self, handle: Union[str, Path]) -> Document:
        path = Path(handle)
        _check_readable(path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except PermissionError as exc:
            raise AccessError(str(exc), identifier=str(path)) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedSourceError(f"invalid JSON: {exc}", identifier=str(path)) from exc

        if not isinstance(data, dict):
            raise MalformedSourceError("document JSON must be an object", identifier=str(path))

        try:
            document = Document.model_validate(data)
        except ValidationError as exc:
            raise MalformedSourceError(str(exc), identifier=str(path)) from exc

        if not document.document_id:
            document.document_id = path.stem
        logger.info("Read document '%s' (%d tabs)", document.title or document.document_id, len(document.tabs))
        return document


# ============================================================
# DOCX
# ============================================================

DOCX_STYLES = {
    "Title": "TITLE",
    "Heading 1": "HEADING_1",
    "Heading 2": "HEADING_2",
    "Heading 3": "HEADING_3",
}

_BLIP = "{http://schemas.openxmlformats.org/drawingml/2006/main}blip"


class DocxSourceReader(SourceReader):
    """Read a .docx with python-docx.

    Inline pictures are written to image_dir so they can be fetched by path
    later. When none is given a temporary directory is created, and close()
    removes it; call close() only once the images have been consumed.
    """

    def __init__(self, image_dir: Optional[Union[str, Path]] = None):
        self.image_dir = Path(image_dir) if image_dir else None
        self.temp_dir: Optional[Path] = None

    def close(self) -> None:
        if self.temp_dir is None:
            return
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logger.debug("Removed image directory %s", self.temp_dir)
        if self.image_dir == self.temp_dir:
            self.image_dir = None
        self.temp_dir = None

    def fetch(self, handle: Union[str, Path]) -> Document:
        path = Path(handle)
        _check_readable(path)

        try:
            word = docx.Document(str(path))
        except PermissionError as exc:
            raise AccessError(str(exc), identifier=str(path)) from exc
        except (PackageNotFoundError, KeyError, ValueError) as exc:
            raise MalformedSourceError(f"not a readable .docx: {exc}", identifier=str(path)) from exc

        if self.image_dir is None:
            self.temp_dir = Path(tempfile.mkdtemp(prefix="docs2slides_images_"))
            self.image_dir = self.temp_dir
        self.image_dir.mkdir(parents=True, exist_ok=True)

        converter = _DocxConverter(word, self.image_dir)
        content = converter.body()
        title = word.core_properties.title or path.stem
        logger.info("Read %s: %d body elements, %d images",
                    path.name, len(content), len(converter.inline_objects))
        return Document(
            document_id=path.stem,
            title=title,
            body=Body(content=content),
            inline_objects=converter.inline_objects,
        )


def _xml_text(p_elm) -> str:
    return "".join(t.text or "" for t in p_elm.iter(qn("w:t")))


class _DocxConverter:
    """Build source nodes from one python-docx Document."""

    def __init__(self, word, image_dir: Path):
        self.word = word
        self.image_dir = image_dir
        self.inline_objects: Dict[str, InlineObject] = {}
        self.image_count = 0

    def body(self) -> List[StructuralElement]:
        content: List[StructuralElement] = []
        for child in self.word.element.body.iterchildren():
            tag = etree.QName(child).localname
            if tag == "p":
                content.append(StructuralElement(paragraph=self.paragraph(child)))
                ppr = child.find(qn("w:pPr"))
                if ppr is not None and ppr.find(qn("w:sectPr")) is not None:
                    content.append(StructuralElement(section_break={}))
            elif tag == "tbl":
                content.append(StructuralElement(table=self.table(child)))
        return content

    def paragraph(self, p_elm) -> Paragraph:
        style_name = DOCX_STYLES.get(self._style_name(p_elm), "NORMAL_TEXT")
        elements: List[ParagraphElement] = []

        for run in p_elm.iter(qn("w:r")):
            for child in run:
                if child.tag == qn("w:t"):
                    elements.append(ParagraphElement(text_run=TextRun(content=child.text or "")))
                elif child.tag == qn("w:tab"):
                    elements.append(ParagraphElement(text_run=TextRun(content="\t")))
                elif child.tag == qn("w:br"):
                    if child.get(qn("w:type")) == "page":
                        elements.append(ParagraphElement(page_break={}))
                    else:
                        elements.append(ParagraphElement(text_run=TextRun(content="\n")))
                elif child.tag == qn("w:drawing"):
                    object_id = self.image(child)
                    if object_id is not None:
                        elements.append(ParagraphElement(
                            inline_object_element=InlineObjectElement(inline_object_id=object_id),
                        ))

        return Paragraph(elements=elements, paragraph_style=ParagraphStyle(named_style_type=style_name))

    def table(self, tbl_elm) -> Table:
        rows: List[TableRow] = []
        for tr in tbl_elm.iterchildren(qn("w:tr")):
            cells = []
            for tc in tr.iterchildren(qn("w:tc")):
                paragraphs = [
                    StructuralElement(paragraph=Paragraph(elements=[
                        ParagraphElement(text_run=TextRun(content=_xml_text(p))),
                    ]))
                    for p in tc.iterchildren(qn("w:p"))
                ]
                cells.append(TableCell(content=paragraphs))
            rows.append(TableRow(table_cells=cells))
        columns = max((len(r.table_cells) for r in rows), default=0)
        return Table(rows=len(rows), columns=columns, table_rows=rows)

    def image(self, drawing) -> Optional[str]:
        """Register the picture in a drawing; returns its inline object id."""
        blip = drawing.find(f".//{_BLIP}")
        if blip is None:
            return None

        self.image_count += 1
        object_id = f"docx.image{self.image_count}"
        rel_id = blip.get(qn("r:embed"))
        part = self.word.part.related_parts.get(rel_id) if rel_id else None
        if part is None:
            # Left unregistered; extraction reports it as unresolved
            logger.debug("Drawing %s has no embedded image part", object_id)
            return object_id

        ext = os.path.splitext(str(part.partname))[1] or ".png"
        image_path = self.image_dir / f"image{self.image_count}{ext}"
        image_path.write_bytes(part.blob)

        size = None
        extent = drawing.find(f".//{qn('wp:extent')}")
        if extent is not None and extent.get("cx") and extent.get("cy"):
            size = Size(
                width=Dimension(magnitude=float(extent.get("cx")), unit="EMU"),
                height=Dimension(magnitude=float(extent.get("cy")), unit="EMU"),
            )

        self.inline_objects[object_id] = InlineObject(
            object_id=object_id,
            inline_object_properties=InlineObjectProperties(
                embedded_object=EmbeddedObject(
                    image_properties=ImageProperties(content_uri=str(image_path)),
                    size=size,
                ),
            ),
        )
        return object_id

    def _style_name(self, p_elm) -> str:
        ppr = p_elm.find(qn("w:pPr"))
        style = ppr.find(qn("w:pStyle")) if ppr is not None else None
        if style is None:
            return ""
        # Unknown ids fall back to the default paragraph style
        found = self.word.styles.get_by_id(style.get(qn("w:val")), WD_STYLE_TYPE.PARAGRAPH)
        return found.name if found is not None else ""


# ============================================================
# DISPATCH
# ============================================================

def reader_for_path(
    path: Union[str, Path],
    image_dir: Optional[Union[str, Path]] = None,
) -> SourceReader:
    """Pick a reader from the file suffix."""
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return JsonSourceReader()
    if suffix == ".docx":
        return DocxSourceReader(image_dir=image_dir)
    raise MalformedSourceError(f"unsupported source format '{suffix}'", identifier=str(path))


def read_document(
    path: Union[str, Path],
    image_dir: Optional[Union[str, Path]] = None,
) -> Document:
    """Read a document with the reader matching its suffix."""
    return reader_for_path(path, image_dir=image_dir).fetch(path)
