"""
Section Detection

Fallback for sources without an explicit tab hierarchy: infer section
boundaries from heading-like paragraphs ("Chapter 3", "Partie 2") and from
break markers.

The heuristic is deliberately simple. A body paragraph that happens to read
"Part 2" becomes a boundary; tune the keyword list or pattern instead of
special-casing it here.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Union

from .config import SectionConfig
from .content import ContentElement, ElementType
from .report import ConversionIssue, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakMarker:
    """A section or page break seen in a flat body."""
    kind: str = "section"


StreamItem = Union[ContentElement, BreakMarker]


def build_heading_pattern(config: SectionConfig) -> Pattern[str]:
    """Compile the boundary pattern: the configured one, or `<Keyword> <integer>`."""
    if config.pattern:
        return re.compile(config.pattern, re.IGNORECASE)

    # Longest first so "Part" never shadows "Partie"
    keywords = sorted(config.keywords, key=len, reverse=True)
    alternation = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"(?P<keyword>{alternation})\s+(?P<number>\d+)", re.IGNORECASE)


@dataclass
class _Section:
    title: Optional[str]
    elements: List[ContentElement] = field(default_factory=list)


class SectionAccumulator:
    """Per-run state for section detection.

    Holds the open section, the sections finalized so far and the section
    index. One accumulator per detect() call.
    """

    def __init__(self, config: SectionConfig):
        self.config = config
        self.index = 0
        self.finalized: List[_Section] = []
        # Content seen before the first boundary
        self.current = _Section(title=None)
        self.issues: List[ConversionIssue] = []

    @property
    def boundary_count(self) -> int:
        return self.index

    @property
    def is_empty(self) -> bool:
        """Nothing attached and no boundary seen yet."""
        return self.index == 0 and not self.current.elements

    def generic_title(self) -> str:
        return self.config.generic_title.format(index=self.index + 1)

    def open(self, title: str) -> None:
        self.finalized.append(self.current)
        self.current = _Section(title=title)
        self.index += 1
        logger.debug("Section %d opened: %s", self.index, title)

    def attach(self, element: ContentElement) -> None:
        self.current.elements.append(element)

    def finish(self) -> List[ContentElement]:
        """Finalize the open section and flatten everything into one stream."""
        self.finalized.append(self.current)
        sections = self.finalized
        self.finalized = []

        if self.index == 0:
            # No boundary anywhere: wrap the whole stream in the default section
            sections[0].title = self.config.default_title

        elements: List[ContentElement] = []
        for section in sections:
            if section.title is None:
                elements.extend(e.with_section_level(0) for e in section.elements)
                continue
            elements.append(ContentElement(
                type=ElementType.SECTION_TITLE,
                text=section.title,
                section_level=0,
            ))
            elements.extend(e.with_section_level(1) for e in section.elements)
        return elements


class SectionDetector:
    """Infer section boundaries in a flat element stream."""

    def __init__(self, config: Optional[SectionConfig] = None):
        self.config = config or SectionConfig()
        self.pattern = build_heading_pattern(self.config)

    def match_heading(self, text: str, index: int) -> Optional[str]:
        """Return the section title if text is a boundary heading, else None."""
        m = self.pattern.fullmatch(text.strip())
        if m is None:
            return None

        groups = m.groupdict()
        keyword = groups.get("keyword")
        number = groups.get("number")
        if keyword and number:
            return f"{keyword} {number}"
        return self.config.generic_title.format(index=index + 1)

    def detect(self, items: Sequence[StreamItem]) -> List[ContentElement]:
        return self.detect_with_issues(items)[0]

    def detect_with_issues(self, items: Sequence[StreamItem]):
        """Split items into sections.

        Returns:
            (elements, issues) where issues note sections opened by breaks.
        """
        acc = SectionAccumulator(self.config)
        pending_break = False

        for item in items:
            if isinstance(item, BreakMarker):
                # Google Docs bodies always open with a section break
                if not acc.is_empty:
                    pending_break = True
                continue

            if item.is_text:
                title = self.match_heading(item.text, acc.index)
                if title is not None:
                    acc.open(title)
                    pending_break = False
                    continue

            if pending_break:
                title = acc.generic_title()
                acc.open(title)
                acc.issues.append(ConversionIssue(
                    code="SEC-001",
                    severity=Severity.info,
                    message="Break marker opened a generic section",
                    identifier=title,
                ))
                pending_break = False

            acc.attach(item)

        logger.info("Detected %d section boundaries", acc.boundary_count)
        return acc.finish(), acc.issues


def detect_sections(
    items: Sequence[StreamItem],
    config: Optional[SectionConfig] = None,
) -> List[ContentElement]:
    """Convenience wrapper around SectionDetector.detect."""
    return SectionDetector(config).detect(items)
