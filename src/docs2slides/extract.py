"""
Structure Extraction

Walks the source document (tabs -> body -> paragraphs / tables / inline
images) and flattens it into an ordered, section-tagged ContentElement
stream. Tab nesting depth becomes the section level directly; documents
without tabs go through the SectionDetector instead.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import ConversionConfig
from .content import ContentElement, ContentStream, ElementType
from .errors import ImageResolutionError, MalformedSourceError
from .report import ConversionIssue
from .sections import BreakMarker, SectionDetector, StreamItem
from .source import Body, Document, InlineObjectResolver, Paragraph, Tab, Table

logger = logging.getLogger(__name__)


STYLE_TO_TYPE = {
    "HEADING_1": ElementType.HEADING_1,
    "HEADING_2": ElementType.HEADING_2,
    "HEADING_3": ElementType.HEADING_3,
    "TITLE": ElementType.DOCUMENT_TITLE,
}

CELL_SEPARATOR = " | "

# Layout hint estimates, in points
IMAGE_X = 50.0
START_Y = 100.0
PARAGRAPH_STEP = 20.0
TABLE_ROW_STEP = 30.0
IMAGE_GAP = 10.0


def normalize_line_breaks(text: str) -> str:
    """Trim text and turn soft breaks (vertical tab, CR, U+2028) into newlines."""
    return "\n".join(text.strip().splitlines()).strip()


def classify_paragraph(paragraph: Paragraph) -> ElementType:
    """Map a paragraph's named style to an element type."""
    return STYLE_TO_TYPE.get(paragraph.style_name, ElementType.PARAGRAPH)


def extract_cell_text(cell) -> str:
    """Join a table cell's paragraph texts with ' | '."""
    texts = [normalize_line_breaks(se.paragraph.text) for se in cell.content if se.paragraph is not None]
    while texts and not texts[-1]:
        texts.pop()
    return CELL_SEPARATOR.join(texts)


def extract_table_data(table: Table) -> List[List[str]]:
    return [
        [extract_cell_text(cell) for cell in row.table_cells]
        for row in table.table_rows
    ]


@dataclass
class ExtractionResult:
    """Elements extracted from one document plus the per-element skips."""
    elements: List[ContentElement]
    issues: List[ConversionIssue] = field(default_factory=list)
    source_id: str = ""
    title: str = ""
    explicit_sections: bool = True

    @property
    def section_count(self) -> int:
        return sum(1 for e in self.elements if e.is_section)

    def to_stream(self) -> ContentStream:
        return ContentStream(source_id=self.source_id, title=self.title, elements=self.elements)


class _BodyWalker:
    """Flattens one body; tracks a running y estimate for layout hints."""

    def __init__(self, resolver: InlineObjectResolver, level: int, issues: List[ConversionIssue]):
        self.resolver = resolver
        self.level = level
        self.issues = issues
        self.y = START_Y

    def walk(self, body: Body) -> List[StreamItem]:
        items: List[StreamItem] = []
        for element in body.content:
            if element.paragraph is not None:
                items.extend(self.paragraph(element.paragraph))
            elif element.table is not None:
                items.append(self.table(element.table))
            elif element.section_break is not None:
                logger.debug("Section break at level %d", self.level)
                items.append(BreakMarker("section"))
        return items

    def paragraph(self, paragraph: Paragraph) -> List[StreamItem]:
        items: List[StreamItem] = []
        text = normalize_line_breaks(paragraph.text)

        break_before = False
        if paragraph.has_page_break:
            # A page break ahead of any text starts the paragraph on a new page
            break_before = True
            for pe in paragraph.elements:
                if pe.page_break is not None:
                    break
                if pe.text_run is not None and (pe.text_run.content or "").strip():
                    break_before = False
                    break
            logger.debug("Page break at level %d", self.level)

        if break_before:
            items.append(BreakMarker("page"))

        if text:
            element_type = classify_paragraph(paragraph)
            items.append(ContentElement(
                type=element_type,
                text=text,
                section_level=self.level,
                y=self.y,
            ))
            logger.debug("%s at level %d: %.60s", element_type.value, self.level, text)
            self.y += PARAGRAPH_STEP

        for object_id in paragraph.inline_object_ids:
            image = self.image(object_id)
            if image is not None:
                items.append(image)

        if paragraph.has_page_break and not break_before:
            items.append(BreakMarker("page"))

        return items

    def table(self, table: Table) -> ContentElement:
        element = ContentElement(
            type=ElementType.TABLE,
            table_data=extract_table_data(table),
            section_level=self.level,
            y=self.y,
        )
        logger.debug("Table at level %d: %dx%d", self.level, element.row_count, element.column_count)
        self.y += element.row_count * TABLE_ROW_STEP
        return element

    def image(self, object_id: str) -> Optional[ContentElement]:
        try:
            resolved = self.resolver.resolve(object_id)
        except ImageResolutionError as exc:
            logger.warning("Skipping image %s: %s", object_id, exc.detail)
            self.issues.append(ConversionIssue.skipped(
                exc.code, identifier=object_id, detail=exc.detail,
            ))
            return None

        element = ContentElement(
            type=ElementType.IMAGE,
            image_reference=resolved.uri,
            section_level=self.level,
            x=IMAGE_X,
            y=self.y,
            width=resolved.width_pt,
            height=resolved.height_pt,
        )
        logger.debug("Image at level %d: %s (%.1fx%.1fpt)",
                     self.level, resolved.uri, resolved.width_pt, resolved.height_pt)
        self.y += resolved.height_pt + IMAGE_GAP
        return element


class StructureExtractor:
    """Flatten a source Document into a ContentElement stream."""

    def __init__(self, config: Optional[ConversionConfig] = None):
        self.config = config or ConversionConfig()

    def extract(self, document: Optional[Document]) -> ExtractionResult:
        if document is None:
            raise MalformedSourceError("source document is null")

        issues: List[ConversionIssue] = []

        if document.tabs:
            elements = self._extract_tabs(document.tabs, issues)
            explicit = True
        elif document.body is not None:
            elements = self._extract_flat(document, issues)
            explicit = False
        else:
            raise MalformedSourceError(
                "source document has no body",
                identifier=document.document_id or None,
            )

        if not elements:
            elements = [ContentElement(
                type=ElementType.SECTION_TITLE,
                text=self.config.sections.default_title,
                section_level=0,
            )]
            logger.info("No content extracted; created default section '%s'",
                        self.config.sections.default_title)

        logger.info("Extracted %d content elements from document %s",
                    len(elements), document.document_id or "(unnamed)")
        return ExtractionResult(
            elements=elements,
            issues=issues,
            source_id=document.document_id,
            title=document.title,
            explicit_sections=explicit,
        )

    def _extract_tabs(self, tabs: List[Tab], issues: List[ConversionIssue]) -> List[ContentElement]:
        """Depth-first, pre-order: title, then body, then child tabs."""
        elements: List[ContentElement] = []
        stack: List[Tuple[Tab, int]] = [(tab, 0) for tab in reversed(tabs)]

        while stack:
            tab, depth = stack.pop()
            title = tab.tab_properties.title
            elements.append(ContentElement(
                type=ElementType.SECTION_TITLE,
                text=title,
                section_level=depth,
            ))
            logger.debug("Section title at level %d: %s", depth, title)

            doc_tab = tab.document_tab
            if doc_tab is not None and doc_tab.body is not None:
                if doc_tab.inline_objects is None:
                    logger.debug("No inline objects in tab '%s'", title)
                walker = _BodyWalker(InlineObjectResolver(doc_tab.inline_objects), depth + 1, issues)
                # Breaks are informational when tabs give the structure
                elements.extend(
                    item for item in walker.walk(doc_tab.body)
                    if isinstance(item, ContentElement)
                )

            stack.extend((child, depth + 1) for child in reversed(tab.child_tabs))

        return elements

    def _extract_flat(self, document: Document, issues: List[ConversionIssue]) -> List[ContentElement]:
        walker = _BodyWalker(InlineObjectResolver(document.inline_objects), 0, issues)
        items = walker.walk(document.body)
        elements, section_issues = SectionDetector(self.config.sections).detect_with_issues(items)
        issues.extend(section_issues)
        return elements


def extract_content(
    document: Optional[Document],
    config: Optional[ConversionConfig] = None,
) -> ExtractionResult:
    """Convenience wrapper around StructureExtractor.extract."""
    return StructureExtractor(config).extract(document)
