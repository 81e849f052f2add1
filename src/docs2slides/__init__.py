"""
docs2slides

Converts a hierarchically structured document (Google Docs JSON export or
Word .docx) into a slide deck: sections become slide groups, long text is
paginated across continuation slides, tables and images get slides of their
own.
"""

__version__ = "0.1.0"

from .config import (
    ConversionConfig,
    PaginationConfig,
    LayoutConfig,
    SectionConfig,
    load_config,
    save_config,
    create_minimal_config,
)

from .content import (
    ContentElement,
    ContentStream,
    ElementType,
    load_content_stream,
    save_content_stream,
    validate_content_json,
)

from .errors import (
    Docs2SlidesError,
    NotFoundError,
    AccessError,
    MalformedSourceError,
    PaginationError,
    WriteError,
    ConversionError,
    RecoverableError,
    ImageResolutionError,
    ImageFetchError,
)

from .readers import (
    JsonSourceReader,
    DocxSourceReader,
    reader_for_path,
    read_document,
)

from .extract import (
    StructureExtractor,
    ExtractionResult,
    extract_content,
)

from .sections import (
    SectionDetector,
    detect_sections,
)

from .paginate import (
    Paginator,
    SlideChunk,
    ChunkKind,
    paginate,
)

from .layout import (
    LayoutAssigner,
    LayoutArchetype,
    LayoutDecision,
    assign_layout,
)

from .writer import (
    DestinationWriter,
    PptxDestinationWriter,
    MemoryDestinationWriter,
)

from .convert import (
    ConversionResult,
    convert_document,
    convert_file,
)

from .report import (
    ConversionIssue,
    ConversionReport,
    Severity,
)

__all__ = [
    # Config
    'ConversionConfig',
    'PaginationConfig',
    'LayoutConfig',
    'SectionConfig',
    'load_config',
    'save_config',
    'create_minimal_config',
    # Content stream
    'ContentElement',
    'ContentStream',
    'ElementType',
    'load_content_stream',
    'save_content_stream',
    'validate_content_json',
    # Errors
    'Docs2SlidesError',
    'NotFoundError',
    'AccessError',
    'MalformedSourceError',
    'PaginationError',
    'WriteError',
    'ConversionError',
    'RecoverableError',
    'ImageResolutionError',
    'ImageFetchError',
    # Readers
    'JsonSourceReader',
    'DocxSourceReader',
    'reader_for_path',
    'read_document',
    # Extraction
    'StructureExtractor',
    'ExtractionResult',
    'extract_content',
    'SectionDetector',
    'detect_sections',
    # Pagination
    'Paginator',
    'SlideChunk',
    'ChunkKind',
    'paginate',
    # Layout
    'LayoutAssigner',
    'LayoutArchetype',
    'LayoutDecision',
    'assign_layout',
    # Writers
    'DestinationWriter',
    'PptxDestinationWriter',
    'MemoryDestinationWriter',
    # Pipeline
    'ConversionResult',
    'convert_document',
    'convert_file',
    # Report
    'ConversionIssue',
    'ConversionReport',
    'Severity',
]
