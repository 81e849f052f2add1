"""
Pagination

Groups the section-tagged element stream into slide-sized chunks under
word and line ceilings. Tables and images get a chunk of their own;
paragraphs are buffered per section and packed line by line; a paragraph
longer than the word ceiling on its own is split across continuation chunks.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel

from .config import PaginationConfig
from .content import ContentElement, ElementType
from .errors import PaginationError

logger = logging.getLogger(__name__)


class ChunkKind(str, Enum):
    TEXT = "TEXT"
    TABLE = "TABLE"
    IMAGE = "IMAGE"


class SlideChunk(BaseModel):
    """One slide's worth of content."""
    kind: ChunkKind = ChunkKind.TEXT
    title: str = ""
    body: str = ""
    element: Optional[ContentElement] = None
    section_level: int = 0
    continuation: bool = False
    oversized: bool = False

    @property
    def word_count(self) -> int:
        return len(self.body.split())

    @property
    def line_count(self) -> int:
        return len(self.body.splitlines()) if self.body else 0


def count_words(text: str) -> int:
    return len(text.split())


class Paginator:
    """Re-chunk an element stream into SlideChunks."""

    def __init__(self, config: Optional[PaginationConfig] = None):
        self.config = config or PaginationConfig()

    def continued(self, title: str) -> str:
        return f"{self.config.continuation_prefix} {title}".strip()

    def paginate(self, elements: Sequence[ContentElement]) -> List[SlideChunk]:
        if not elements:
            raise PaginationError("empty content stream; extraction must emit at least one section")

        chunks: List[SlideChunk] = []
        buffer: List[str] = []
        title = ""
        level = 0
        # Sections that end without content still get a title slide
        section_open = False
        section_start = 0

        def flush() -> None:
            if buffer:
                chunks.extend(self.pack(buffer, title, level))
                buffer.clear()

        def close_section() -> None:
            if section_open and len(chunks) == section_start:
                chunks.append(SlideChunk(title=title, section_level=level))

        for element in elements:
            if element.type == ElementType.SECTION_TITLE:
                flush()
                close_section()
                title = element.text
                level = element.section_level
                if self.config.section_title_slides:
                    chunks.append(SlideChunk(title=title, section_level=level))
                    section_open = False
                else:
                    section_open = True
                section_start = len(chunks)
                continue

            if element.type in (ElementType.TABLE, ElementType.IMAGE):
                flush()
                chunks.append(SlideChunk(
                    kind=ChunkKind(element.type.value),
                    title=title,
                    element=element,
                    section_level=element.section_level,
                ))
                continue

            if count_words(element.text) > self.config.max_words_per_chunk:
                flush()
                chunks.extend(self.split_oversized(element.text, title, level))
                continue

            if element.type != ElementType.PARAGRAPH:
                # Headings and the document title start a new buffer
                flush()
            buffer.append(element.text)

        flush()
        close_section()

        logger.info("Paginated %d elements into %d chunks", len(elements), len(chunks))
        return chunks

    def pack(self, texts: List[str], title: str, level: int) -> List[SlideChunk]:
        """Greedily pack buffered text lines into chunks.

        A chunk closes when the next line would break the line ceiling
        (checked first) or the word ceiling.
        """
        max_lines = self.config.max_lines_per_chunk
        max_words = self.config.max_words_per_chunk

        lines = [line for line in "\n".join(texts).splitlines() if line.strip()]
        chunks: List[SlideChunk] = []
        current: List[str] = []
        words = 0

        for line in lines:
            line_words = count_words(line)
            if current and (len(current) + 1 > max_lines or words + line_words > max_words):
                chunks.append(SlideChunk(title=title, body="\n".join(current), section_level=level))
                current = []
                words = 0
            current.append(line)
            words += line_words

        if current:
            chunks.append(SlideChunk(title=title, body="\n".join(current), section_level=level))
        return chunks

    def split_oversized(self, text: str, title: str, level: int) -> List[SlideChunk]:
        """Split one paragraph into word-bounded continuation chunks."""
        max_words = self.config.max_words_per_chunk
        words = text.split()
        chunks: List[SlideChunk] = []

        for start in range(0, len(words), max_words):
            first = start == 0
            chunks.append(SlideChunk(
                title=title if first else self.continued(title),
                body=" ".join(words[start:start + max_words]),
                section_level=level,
                continuation=not first,
                oversized=True,
            ))

        logger.debug("Split oversized paragraph (%d words) into %d chunks", len(words), len(chunks))
        return chunks


def paginate(
    elements: Sequence[ContentElement],
    config: Optional[PaginationConfig] = None,
) -> List[SlideChunk]:
    """Convenience wrapper around Paginator.paginate."""
    return Paginator(config).paginate(elements)
