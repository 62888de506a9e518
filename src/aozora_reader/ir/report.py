"""Parse report: diagnostics and statistics from a parse run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ParseReport:
    """Summary of one parsed document."""

    # Source info
    source_file: str = ""
    character_count: int = 0

    # Encoding
    encoding: str = ""
    encoding_confidence: Optional[float] = None
    is_valid_encoding: Optional[bool] = None
    low_confidence_threshold: float = 0.6

    # Timing
    parse_time_ms: float = 0.0

    # Element counts
    element_counts: dict[str, int] = field(default_factory=dict)
    heading_count: int = 0
    ruby_count: int = 0
    image_count: int = 0
    caption_count: int = 0
    indent_block_count: int = 0
    max_block_depth: int = 0

    # Heading level distribution: {level: count}
    headings_by_level: dict[str, int] = field(default_factory=dict)

    # Warnings collected while building the report
    warnings: list[str] = field(default_factory=list)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self._to_dict(), indent=indent, ensure_ascii=False)

    def _to_dict(self) -> dict:
        """Convert to a plain dict for JSON serialization."""
        return {
            "source_file": self.source_file,
            "character_count": self.character_count,
            "encoding": {
                "name": self.encoding,
                "confidence": (
                    round(self.encoding_confidence, 2)
                    if self.encoding_confidence is not None
                    else None
                ),
                "valid": self.is_valid_encoding,
            },
            "timing": {
                "parse_ms": round(self.parse_time_ms, 3),
            },
            "element_counts": dict(sorted(self.element_counts.items())),
            "summary": {
                "headings": self.heading_count,
                "ruby": self.ruby_count,
                "images": self.image_count,
                "captions": self.caption_count,
                "indent_blocks": self.indent_block_count,
                "max_block_depth": self.max_block_depth,
            },
            "headings_by_level": self.headings_by_level,
            "warnings": self.warnings,
        }

    @classmethod
    def from_document(
        cls, doc: "ParsedDocument", low_confidence_threshold: float = 0.6
    ) -> ParseReport:
        """Build a report by walking a parsed document's element tree."""
        meta = doc.metadata
        report = cls(
            source_file=meta.filename,
            character_count=meta.character_count,
            encoding=meta.encoding,
            encoding_confidence=meta.encoding_confidence,
            is_valid_encoding=meta.is_valid_encoding,
            low_confidence_threshold=low_confidence_threshold,
            parse_time_ms=meta.parse_time_ms,
        )
        _walk_elements(doc.elements, report, depth=0)

        if meta.is_valid_encoding is False:
            report.warnings.append(
                f"Encoding could not be determined reliably (decoded as {meta.encoding})"
            )
        elif (
            meta.encoding_confidence is not None
            and meta.encoding_confidence < low_confidence_threshold
        ):
            report.warnings.append(
                f"Low encoding confidence {meta.encoding_confidence:.0%} for {meta.encoding}"
            )
        if report.heading_count and doc.title is None:
            report.warnings.append("Document has headings but no large heading for a title")

        return report


def _walk_elements(elements: list, report: ParseReport, depth: int) -> None:
    """Recursively walk elements to populate report counters."""
    from aozora_reader.ir.schema import Caption, Heading, Image, IndentBlock, RubyText

    for element in elements:
        report.element_counts[element.type] = report.element_counts.get(element.type, 0) + 1

        if isinstance(element, Heading):
            report.heading_count += 1
            level = element.level.value
            report.headings_by_level[level] = report.headings_by_level.get(level, 0) + 1
        elif isinstance(element, RubyText):
            report.ruby_count += 1
        elif isinstance(element, Image):
            report.image_count += 1
        elif isinstance(element, Caption):
            report.caption_count += 1
        elif isinstance(element, IndentBlock):
            report.indent_block_count += 1
            report.max_block_depth = max(report.max_block_depth, depth + 1)
            _walk_elements(element.elements, report, depth + 1)
