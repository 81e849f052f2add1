"""
Conversion Pipeline

extract -> paginate -> assign layout -> write, sequentially, for one
document. Each chunk becomes its own batch(es) against the destination
writer. Per-element failures are recorded in the report and skipped; any
other failure aborts the run with the stage it happened in.
"""

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .config import ConversionConfig
from .errors import ConversionError, Docs2SlidesError, RecoverableError
from .extract import StructureExtractor
from .fetch import ImageFetcher
from .ids import IdAllocator
from .layout import LayoutAssigner, LayoutDecision
from .paginate import ChunkKind, Paginator, SlideChunk
from .readers import reader_for_path
from .report import ConversionIssue, ConversionReport
from .source import Document
from .writer import (
    Batch,
    CreateImage,
    CreateSlide,
    CreateTable,
    DestinationWriter,
    InsertText,
    PptxDestinationWriter,
    SetCellText,
    SetFontSize,
)

logger = logging.getLogger(__name__)

TITLE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


@dataclass
class ConversionResult:
    """Where the deck went and what was dropped on the way."""
    location: str
    title: str
    report: ConversionReport


@contextlib.contextmanager
def _stage(name: str, identifier: Optional[str] = None) -> Iterator[None]:
    """Let typed errors through; wrap anything else in ConversionError."""
    try:
        yield
    except Docs2SlidesError:
        raise
    except Exception as exc:
        raise ConversionError(
            f"{type(exc).__name__}: {exc}",
            stage=name,
            identifier=identifier,
        ) from exc


def presentation_title(
    base: Optional[str],
    config: Optional[ConversionConfig] = None,
    now: Optional[datetime] = None,
) -> str:
    """Title of the destination deck, stamped with the conversion time."""
    config = config or ConversionConfig()
    title = (base or "").strip() or config.default_title
    if not config.timestamp_title:
        return title
    stamp = (now or datetime.now()).strftime(TITLE_TIMESTAMP_FORMAT)
    return f"{title} - {stamp}"


class SlideBuilder:
    """Turn laid-out chunks into writer batches and apply them."""

    def __init__(
        self,
        writer: DestinationWriter,
        report: ConversionReport,
        ids: Optional[IdAllocator] = None,
        fetcher: Optional[ImageFetcher] = None,
    ):
        self.writer = writer
        self.report = report
        self.ids = ids or IdAllocator()
        self.fetcher = fetcher or ImageFetcher()
        self.slide_count = 0

    def build(self, index: int, chunk: SlideChunk, decision: LayoutDecision) -> None:
        if chunk.kind == ChunkKind.TABLE:
            self.table_slide(chunk, decision)
        elif chunk.kind == ChunkKind.IMAGE:
            self.image_slide(index, chunk, decision)
        else:
            self.text_slide(chunk, decision)

    def _create_slide(self, decision: LayoutDecision) -> CreateSlide:
        self.slide_count += 1
        return CreateSlide(object_id=self.ids.slide(), layout=decision.archetype)

    def text_slide(self, chunk: SlideChunk, decision: LayoutDecision) -> None:
        create = self._create_slide(decision)
        self.writer.apply([create])

        # Placeholder ids only exist once the slide does
        placeholders = self.writer.resolve_placeholders(create.object_id)
        batch: Batch = []
        if placeholders.title_id is not None and chunk.title:
            batch.append(InsertText(object_id=placeholders.title_id, text=chunk.title))
            batch.append(SetFontSize(object_id=placeholders.title_id, size_pt=decision.title_font_pt))
        if placeholders.body_id is not None and chunk.body:
            batch.append(InsertText(object_id=placeholders.body_id, text=chunk.body))
            batch.append(SetFontSize(object_id=placeholders.body_id, size_pt=decision.body_font_pt))
        if batch:
            self.writer.apply(batch)

    def table_slide(self, chunk: SlideChunk, decision: LayoutDecision) -> None:
        create = self._create_slide(decision)
        batch: Batch = [create]

        if decision.table_rows and decision.table_columns:
            table_id = self.ids.table()
            batch.append(CreateTable(
                object_id=table_id,
                slide_id=create.object_id,
                rows=decision.table_rows,
                columns=decision.table_columns,
                box=decision.table_box,
            ))
            # Ragged rows leave their missing cells empty
            for r, row in enumerate(chunk.element.table_data or []):
                for c, text in enumerate(row):
                    batch.append(SetCellText(table_id=table_id, row=r, column=c, text=text))
                    batch.append(SetFontSize(
                        object_id=table_id, size_pt=decision.cell_font_pt, row=r, column=c,
                    ))
        else:
            logger.debug("Empty table; creating a blank slide only")

        self.writer.apply(batch)

    def image_slide(self, index: int, chunk: SlideChunk, decision: LayoutDecision) -> None:
        uri = chunk.element.image_reference
        try:
            data = self.fetcher.download(uri) if self.writer.requires_image_bytes else None
        except RecoverableError as exc:
            self._skip(index, exc)
            return

        create = self._create_slide(decision)
        try:
            self.writer.apply([
                create,
                CreateImage(
                    object_id=self.ids.image(),
                    slide_id=create.object_id,
                    uri=uri,
                    box=decision.image_box,
                    data=data,
                ),
            ])
        except RecoverableError as exc:
            self._skip(index, exc)

    def _skip(self, index: int, exc: RecoverableError) -> None:
        logger.warning("Skipping image %s: %s", exc.identifier, exc.detail)
        self.report.issues.append(ConversionIssue.skipped(
            exc.code, identifier=exc.identifier or "", detail=exc.detail, element_index=index,
        ))


def convert_document(
    document: Optional[Document],
    writer: DestinationWriter,
    config: Optional[ConversionConfig] = None,
    fetcher: Optional[ImageFetcher] = None,
    title: Optional[str] = None,
    ids: Optional[IdAllocator] = None,
) -> ConversionResult:
    """Convert one source document into slides on the given writer.

    Args:
        document: Parsed source document.
        writer: Destination writer; create_presentation() is called here.
        config: Conversion settings (defaults when None).
        fetcher: Image downloader, used when the writer needs image bytes.
        title: Deck title; defaults to the document title.
        ids: Identifier allocator; a fresh one per run when None.

    Returns:
        ConversionResult with the deck location and the run report.
    """
    config = config or ConversionConfig()
    doc_id = document.document_id if document is not None else None
    report = ConversionReport()

    with _stage("extraction", doc_id):
        extraction = StructureExtractor(config).extract(document)
    report.extend(extraction.issues)
    report.element_count = len(extraction.elements)
    report.section_count = extraction.section_count

    with _stage("pagination", doc_id):
        chunks: List[SlideChunk] = Paginator(config.pagination).paginate(extraction.elements)
    report.chunk_count = len(chunks)

    assigner = LayoutAssigner(config.layout)
    deck_title = presentation_title(title or extraction.title, config)
    builder = SlideBuilder(writer, report, ids=ids, fetcher=fetcher)

    with _stage("write", doc_id):
        writer.create_presentation(deck_title)
        for index, chunk in enumerate(chunks):
            builder.build(index, chunk, assigner.assign(chunk))
        location = writer.finish()

    report.slide_count = builder.slide_count
    logger.info("Converted %s: %d chunks -> %d slides (%d skipped)",
                doc_id or "(unnamed)", len(chunks), builder.slide_count, report.skipped_count)
    return ConversionResult(location=location, title=deck_title, report=report)


def convert_file(
    path: Union[str, Path],
    output: Union[str, Path],
    config: Optional[ConversionConfig] = None,
    template: Optional[Union[str, Path]] = None,
    title: Optional[str] = None,
    image_dir: Optional[Union[str, Path]] = None,
    fetcher: Optional[ImageFetcher] = None,
) -> ConversionResult:
    """Read a .json or .docx source and write a .pptx.

    Images a .docx reader unpacks into a temporary directory are removed once
    the deck is written; pass image_dir to keep them.
    """
    config = config or ConversionConfig()
    reader = reader_for_path(path, image_dir=image_dir)
    try:
        document = reader.fetch(path)
        writer = PptxDestinationWriter(
            output,
            template=template,
            slide_width_pt=config.layout.slide_width,
            slide_height_pt=config.layout.slide_height,
        )
        return convert_document(document, writer, config=config, fetcher=fetcher, title=title)
    finally:
        reader.close()
