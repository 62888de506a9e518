"""Aozora Bunko notation parser.

Scans the text once, line by line. At each position the directive
recognizers are tried first (when text formatting is enabled), then the
inline recognizers in their fixed priority order; the first match is
emitted and the scan advances past it. Each physical line ends with a
``"\\n"`` text marker. The flat stream then goes through indent block
processing and cleanup.

Malformed notation never fails a parse: unmatched brackets fall through to
plain text, and an unexpected error mid-scan yields a partial document.
Only oversized input raises.
"""

from __future__ import annotations

import logging
import re
import time
from bisect import bisect_right
from typing import Iterator, Optional

from aozora_reader.config import Config
from aozora_reader.exceptions import FileSizeLimitError
from aozora_reader.ir.schema import (
    DocumentMetadata,
    FormattingInstruction,
    Heading,
    HeadingLevel,
    ParsedDocument,
    PlainText,
    Range,
    iter_elements,
)
from aozora_reader.parsers.base import BaseTextParser, EncodingInfo, RecognizerMatch
from aozora_reader.parsers.blocks import IndentBlockProcessor
from aozora_reader.parsers.cleanup import cleanup_elements
from aozora_reader.parsers.inline import InlineNotationParser
from aozora_reader.parsers.instructions import FormattingInstructionParser

logger = logging.getLogger(__name__)

_NEWLINE_RE = re.compile(r"\r?\n")
NEWLINE = "\n"


class AozoraParser(BaseTextParser):
    """Parses Aozora Bunko formatted text into a ``ParsedDocument``."""

    def __init__(self, config: Config | None = None):
        super().__init__(config)
        self.instruction_parser = FormattingInstructionParser(self.config.parser.max_indent_count)
        self.inline_parser = InlineNotationParser(self.config.parser)
        self.block_processor = IndentBlockProcessor()

    @property
    def name(self) -> str:
        return "aozora"

    def parse(
        self,
        text: str,
        filename: str,
        encoding_info: EncodingInfo | None = None,
    ) -> ParsedDocument:
        """Parse Aozora text into a document.

        Args:
            text: The decoded document text.
            filename: Name of the source file, recorded in metadata.
            encoding_info: Optional encoding detection result.

        Returns:
            The parsed document; partial if scanning hit an unexpected error.

        Raises:
            FileSizeLimitError: If ``text`` is longer than ``max_file_size``.
        """
        started = time.perf_counter()

        limit = self.config.parser.max_file_size
        if len(text) > limit:
            raise FileSizeLimitError(len(text), limit)

        elements = self.parse_elements(text) if text else []

        document = ParsedDocument(elements=elements)
        document.title = _find_title(document.headings)
        document.metadata = _build_metadata(
            filename, text, elements, encoding_info, time.perf_counter() - started
        )
        logger.debug(
            "Parsed %s: %d elements, %d headings, %d images in %.1f ms",
            filename,
            len(elements),
            len(document.headings),
            len(document.images),
            document.metadata.parse_time_ms,
        )
        return document

    def parse_elements(self, text: str) -> list:
        """Run scan, block processing and cleanup over ``text``."""
        raw: list = []
        try:
            self.scan(text, raw)
        except Exception:
            logger.warning(
                "Parser error after %d elements, returning partial result",
                len(raw),
                exc_info=True,
            )

        try:
            elements = raw
            if self.config.parser.enable_text_formatting:
                elements = self.block_processor.process(elements)
            elements = cleanup_elements(elements)
        except Exception:
            logger.warning("Post-processing failed, returning unprocessed elements", exc_info=True)
            elements = [e for e in raw if not isinstance(e, FormattingInstruction)]

        _assign_heading_ids(elements)
        _annotate_positions(elements, text)
        return elements

    def scan(self, text: str, out: list) -> None:
        """Append the flat element stream for ``text`` to ``out``.

        ``out`` is filled in place so that a caller catching an exception
        still holds everything emitted before it.
        """
        recognizers = self.recognizers()

        for line, line_start in _split_lines(text):
            if self.config.parser.preserve_leading_spaces:
                content = self.instruction_parser.preserve_leading_spaces(line)
                base = line_start + len(line) - len(content)
            else:
                stripped = line.lstrip()
                content = stripped.rstrip()
                base = line_start + len(line) - len(stripped)

            index = 0
            while index < len(content):
                match = _first_match(recognizers, content[index:], base + index)
                if match is None:
                    # Nothing matched: skip one character so the scan always ends
                    index += 1
                    continue
                out.append(match.element)
                index += max(match.length, 1)

            line_end = line_start + len(line)
            out.append(PlainText(content=NEWLINE, range=Range.span(line_end, line_end + 1)))

    def recognizers(self) -> list:
        """Every recognizer the scanner tries, in priority order."""
        recognizers = []
        if self.config.parser.enable_text_formatting:
            recognizers.extend(self.instruction_parser.recognizers())
        recognizers.extend(self.inline_parser.recognizers())
        return recognizers


def _first_match(recognizers: list, text: str, offset: int) -> Optional[RecognizerMatch]:
    for recognizer in recognizers:
        match = recognizer(text, offset)
        if match is not None:
            return match
    return None


def _split_lines(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(line, absolute_start)`` for every line, like ``re.split``."""
    start = 0
    for newline in _NEWLINE_RE.finditer(text):
        yield text[start:newline.start()], start
        start = newline.end()
    yield text[start:], start


def _assign_heading_ids(elements: list) -> None:
    """Make heading ids unique with a per-document counter."""
    counter = 0
    for element in iter_elements(elements):
        if isinstance(element, Heading):
            counter += 1
            element.id = f"{element.id}-{counter}"


def _annotate_positions(elements: list, text: str) -> None:
    """Fill in 1-based line and 0-based column from each absolute index."""
    line_starts = [0] + [m.end() for m in _NEWLINE_RE.finditer(text)]
    for element in iter_elements(elements):
        for position in (element.range.start, element.range.end):
            line = bisect_right(line_starts, position.index)
            position.line = line
            position.column = position.index - line_starts[line - 1]


def _find_title(headings: list[Heading]) -> Optional[str]:
    for heading in headings:
        if heading.level == HeadingLevel.LARGE:
            return heading.text
    return None


def _build_metadata(
    filename: str,
    text: str,
    elements: list,
    encoding_info: EncodingInfo | None,
    elapsed: float,
) -> DocumentMetadata:
    info = encoding_info or EncodingInfo(encoding="utf-8")
    return DocumentMetadata(
        filename=filename,
        file_size=len(text),
        encoding=info.encoding,
        encoding_confidence=info.confidence,
        has_bom=info.has_bom,
        is_valid_encoding=info.is_valid_encoding,
        parse_time_ms=elapsed * 1000,
        element_count=len(elements),
        character_count=len(text),
    )
