"""Pipeline orchestrator: read bytes → detect encoding → parse → (optional) generate.

Coordinates file loading, parsing and Word generation, and provides
convenience methods for partial workflows (parse-only, generate-from-JSON).
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from aozora_reader.config import Config
from aozora_reader.encoding.detector import EncodingResult, detect_and_decode, is_binary_file
from aozora_reader.exceptions import EncodingError, ParseError
from aozora_reader.generators.word_generator import WordGenerator
from aozora_reader.ir.report import ParseReport
from aozora_reader.ir.schema import ParsedDocument
from aozora_reader.parsers.base import EncodingInfo
from aozora_reader.parsers.factory import create_parser

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates Aozora text → ParsedDocument → Word conversion."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config.default()
        self.last_report: ParseReport | None = None

    def load(self, path: Path) -> tuple[str, EncodingResult]:
        """Read a text file and decode it.

        Args:
            path: Input text file.

        Returns:
            The decoded text and the encoding detection result.

        Raises:
            EncodingError: If the file cannot be read or looks binary.
        """
        path = Path(path)
        logger.info("Loading %s", path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise EncodingError(f"Failed to read {path}: {exc}") from exc
        return self.decode(data, path.name)

    async def aload(self, path: Path) -> tuple[str, EncodingResult]:
        """Async variant of ``load``; the read runs in a worker thread."""
        path = Path(path)
        logger.info("Loading %s", path)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise EncodingError(f"Failed to read {path}: {exc}") from exc
        return self.decode(data, path.name)

    @staticmethod
    def decode(data: bytes, name: str = "<bytes>") -> tuple[str, EncodingResult]:
        """Reject binary input, then detect the encoding and decode."""
        if is_binary_file(data):
            raise EncodingError(f"{name} looks like a binary file")

        result = detect_and_decode(data)
        if not result.is_valid:
            logger.warning(
                "%s: encoding uncertain, decoded as %s (confidence %.2f)",
                name,
                result.encoding.value,
                result.confidence,
            )
        return result.text, result

    def parse_text(
        self, text: str, filename: str, encoding: EncodingResult | None = None
    ) -> ParsedDocument:
        """Parse already-decoded text and record a report."""
        parser = create_parser(self.config)
        info = EncodingInfo.from_result(encoding) if encoding is not None else None
        parsed = parser.parse(text, filename, info)
        self.last_report = ParseReport.from_document(parsed)
        return parsed

    def parse_file(self, path: Path) -> ParsedDocument:
        """Load, decode and parse a text file.

        Args:
            path: Input text file.

        Returns:
            The parsed document.
        """
        path = Path(path)
        text, encoding = self.load(path)
        logger.info("Parsing %s", path)
        return self.parse_text(text, path.name, encoding)

    async def aparse_file(self, path: Path) -> ParsedDocument:
        """Async variant of ``parse_file``; parsing itself stays synchronous."""
        path = Path(path)
        text, encoding = await self.aload(path)
        return self.parse_text(text, path.name, encoding)

    def convert(
        self,
        input_path: Path,
        output_path: Path,
        save_json: bool = False,
        json_path: Path | None = None,
        save_report: bool = False,
        report_path: Path | None = None,
    ) -> Path:
        """Full pipeline: text file → ParsedDocument → .docx.

        Args:
            input_path: Input Aozora text file.
            output_path: Output .docx file.
            save_json: Whether to save the parsed document as JSON.
            json_path: Custom path for the JSON. Defaults to {output_stem}.json.
            save_report: Whether to save a parse report JSON.
            report_path: Custom path for report JSON. Defaults to {output_stem}.report.json.

        Returns:
            Path to the generated .docx file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        t0 = time.monotonic()
        parsed = self.parse_file(input_path)
        t1 = time.monotonic()
        logger.debug("Parse stage took %.3f s", t1 - t0)

        if save_json:
            if json_path is None:
                json_path = output_path.with_suffix(".json")
            self.save_json(parsed, json_path)

        result = self.generate(parsed, output_path, base_dir=input_path.parent)
        logger.debug("Generate stage took %.3f s", time.monotonic() - t1)

        if save_report and self.last_report is not None:
            if report_path is None:
                report_path = output_path.with_suffix(".report.json")
            Path(report_path).write_text(self.last_report.to_json(), encoding="utf-8")
            logger.info("Saved report to %s", report_path)

        return result

    def generate(
        self,
        parsed: ParsedDocument,
        output_path: Path,
        base_dir: Path | None = None,
    ) -> Path:
        """Render a parsed document to .docx.

        Args:
            parsed: The parsed document.
            output_path: Output .docx file path.
            base_dir: Base dir for resolving relative image paths.

        Returns:
            Path to the generated .docx file.
        """
        output_path = Path(output_path)
        logger.info("Generating %s", output_path)

        generator = WordGenerator(self.config)
        return generator.generate(parsed, output_path, base_dir)

    def inspect(self, path: Path) -> str:
        """Parse a text file and return the document as formatted JSON."""
        return self.parse_file(path).to_json()

    def from_json(self, json_path: Path, output_path: Path) -> Path:
        """Generate .docx from a saved ParsedDocument JSON file.

        Args:
            json_path: Path to the JSON file.
            output_path: Output .docx file path.

        Returns:
            Path to the generated .docx file.
        """
        json_path = Path(json_path)
        output_path = Path(output_path)

        logger.info("Loading parsed document from %s", json_path)
        try:
            parsed = ParsedDocument.from_json(json_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ParseError(f"JSON file not found: {json_path}")
        except Exception as exc:
            raise ParseError(f"Failed to load document from {json_path}: {exc}") from exc

        return self.generate(parsed, output_path, base_dir=json_path.parent)

    @staticmethod
    def save_json(parsed: ParsedDocument, path: Path) -> Path:
        """Save a parsed document to a JSON file."""
        path = Path(path)
        logger.info("Saving parsed document to %s", path)
        path.write_text(parsed.to_json(), encoding="utf-8")
        return path
