"""
Conversion Report

Collects what a run skipped or noticed along the way: unresolved images,
failed downloads, sections opened by break markers. A run that completes
with skipped elements is still a success; the report makes the drops
countable.
"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Severity(str, Enum):
    """Severity of a report entry."""
    error = "error"
    warning = "warning"
    info = "info"


ISSUE_MESSAGES = {
    "IMG-001": "Inline image reference could not be resolved",
    "IMG-002": "Embedded object or image properties missing",
    "IMG-003": "Image size metadata missing",
    "IMG-004": "Image download failed",
    "SEC-001": "Break marker opened a generic section",
}


@dataclass
class ConversionIssue:
    """A single finding recorded during a conversion run."""
    code: str
    severity: Severity
    message: str
    element_index: Optional[int] = None
    identifier: str = ""
    detail: str = ""

    @classmethod
    def skipped(
        cls,
        code: str,
        identifier: str = "",
        detail: str = "",
        element_index: Optional[int] = None,
    ) -> "ConversionIssue":
        """A warning for an element dropped from the output."""
        return cls(
            code=code,
            severity=Severity.warning,
            message=ISSUE_MESSAGES.get(code, "Element skipped"),
            element_index=element_index,
            identifier=identifier,
            detail=detail,
        )


@dataclass
class ConversionReport:
    """Aggregated results of one conversion run."""
    issues: List[ConversionIssue] = field(default_factory=list)
    element_count: int = 0
    section_count: int = 0
    chunk_count: int = 0
    slide_count: int = 0

    @property
    def errors(self) -> List[ConversionIssue]:
        return [i for i in self.issues if i.severity == Severity.error]

    @property
    def skipped(self) -> List[ConversionIssue]:
        return [i for i in self.issues if i.severity == Severity.warning]

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def extend(self, issues: List[ConversionIssue]) -> None:
        self.issues.extend(issues)

    def print_report(self, file=None) -> None:
        """Print a human-readable conversion summary."""
        out = file or sys.stdout

        print("=" * 60, file=out)
        print("CONVERSION REPORT", file=out)
        print("=" * 60, file=out)
        print(f"Elements: {self.element_count}  |  Sections: {self.section_count}  |  "
              f"Chunks: {self.chunk_count}  |  Slides: {self.slide_count}", file=out)
        print(f"Issues: {len(self.errors)} errors, {len(self.skipped)} skipped, "
              f"{len(self.issues) - len(self.errors) - len(self.skipped)} info", file=out)

        if self.issues:
            print("-" * 60, file=out)
        for issue in self.issues:
            prefix = {
                Severity.error: "ERROR  ",
                Severity.warning: "SKIP   ",
                Severity.info: "INFO   ",
            }[issue.severity]

            where = f" [element {issue.element_index}]" if issue.element_index is not None else ""
            ident = f" ({issue.identifier})" if issue.identifier else ""
            print(f"  {prefix} {issue.code}{where}: {issue.message}{ident}", file=out)
            if issue.detail:
                print(f"         {issue.detail}", file=out)

        print("-" * 60, file=out)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "element_count": self.element_count,
            "section_count": self.section_count,
            "chunk_count": self.chunk_count,
            "slide_count": self.slide_count,
            "skipped_count": self.skipped_count,
            "issues": [
                {
                    "code": i.code,
                    "severity": i.severity.value,
                    "message": i.message,
                    "element_index": i.element_index,
                    "identifier": i.identifier,
                    "detail": i.detail,
                }
                for i in self.issues
            ],
        }
