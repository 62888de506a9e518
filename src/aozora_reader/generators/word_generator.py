"""Recursive ParsedDocument → .docx renderer.

Walks the element list in order. Text-like elements accumulate into the
current paragraph until a ``"\\n"`` line marker closes it; headings, images,
captions and indented lines get paragraphs of their own. Indent blocks are
rendered recursively with their indent added to everything inside.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from docx import Document

from aozora_reader.config import Config
from aozora_reader.exceptions import GenerationError
from aozora_reader.generators.image_handler import add_image
from aozora_reader.generators.styles import (
    add_ruby,
    align_right,
    apply_caption_formatting,
    apply_indent,
    heading_style_name,
)
from aozora_reader.ir.schema import (
    Caption,
    Heading,
    Image,
    IndentBlock,
    LeftIndentedText,
    ParsedDocument,
    PlainText,
    RightIndentedText,
    RubyText,
)

logger = logging.getLogger(__name__)


@dataclass
class _LineState:
    """Rendering position inside the current physical line."""

    paragraph: object = None  # open body paragraph, if any
    has_content: bool = False  # something was rendered since the last newline


class WordGenerator:
    """Generates a Word document from a ParsedDocument."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config.default()

    def generate(
        self,
        parsed: ParsedDocument,
        output_path: Path,
        base_dir: Optional[Path] = None,
    ) -> Path:
        """Generate a .docx file from a ParsedDocument.

        Args:
            parsed: The document to render.
            output_path: Where to write the .docx file.
            base_dir: Base directory for resolving relative image paths.
                      Defaults to output_path's parent directory.

        Returns:
            The output path (for convenience).
        """
        output_path = Path(output_path)
        if base_dir is None:
            base_dir = output_path.parent

        doc = self.generate_document(parsed, base_dir)

        try:
            doc.save(str(output_path))
        except OSError as exc:
            raise GenerationError(f"Failed to save document: {exc}") from exc

        logger.info("Generated %s", output_path)
        return output_path

    def generate_document(
        self,
        parsed: ParsedDocument,
        base_dir: Optional[Path] = None,
    ) -> Document:
        """Generate and return a python-docx Document object (for testing).

        Args:
            parsed: The document to render.
            base_dir: Base directory for resolving relative image paths.

        Returns:
            The python-docx Document object.
        """
        doc = Document()

        if parsed.title:
            doc.core_properties.title = parsed.title
        if parsed.author:
            doc.core_properties.author = parsed.author

        self._render_elements(doc, parsed.elements, base_dir, indent=0, state=_LineState())
        return doc

    def _render_elements(
        self,
        doc: Document,
        elements: list,
        base_dir: Optional[Path],
        indent: int,
        state: _LineState,
    ) -> None:
        """Dispatch rendering to the appropriate method by element type."""
        for element in elements:
            if isinstance(element, PlainText):
                self._render_text(doc, element, indent, state)
            elif isinstance(element, RubyText):
                add_ruby(self._body_paragraph(doc, indent, state), element.text, element.ruby, self.config.style)
            elif isinstance(element, Heading):
                self._render_heading(doc, element, indent)
                self._close_line(state)
            elif isinstance(element, Image):
                paragraph = add_image(doc, element, self.config.image, base_dir)
                apply_indent(paragraph, self.config.style, left_chars=indent)
                self._close_line(state)
            elif isinstance(element, Caption):
                paragraph = doc.add_paragraph(element.text)
                apply_caption_formatting(paragraph, self.config.style)
                apply_indent(paragraph, self.config.style, left_chars=indent)
                self._close_line(state)
            elif isinstance(element, LeftIndentedText):
                paragraph = doc.add_paragraph(element.content.rstrip("\n"), style=self.config.style.body_style)
                apply_indent(paragraph, self.config.style, left_chars=indent + element.indent_count)
                self._close_line(state)
            elif isinstance(element, RightIndentedText):
                paragraph = doc.add_paragraph(element.content.rstrip("\n"), style=self.config.style.body_style)
                align_right(paragraph)
                apply_indent(paragraph, self.config.style, left_chars=indent, right_chars=element.indent_count)
                self._close_line(state)
            elif isinstance(element, IndentBlock):
                # The newline after the start directive belongs to the directive's line
                inner = _LineState(has_content=True)
                self._render_elements(doc, element.elements, base_dir, indent + element.indent_count, inner)
                self._close_line(state)
            else:
                self._render_unknown(doc, element, indent, state)

    def _render_text(self, doc: Document, element: PlainText, indent: int, state: _LineState) -> None:
        """Write a text run; each newline closes the current line."""
        for i, chunk in enumerate(element.content.split("\n")):
            if i > 0:
                if not state.has_content:
                    # An empty source line becomes an empty paragraph
                    self._new_paragraph(doc, indent)
                state.paragraph = None
                state.has_content = False
            if chunk:
                self._body_paragraph(doc, indent, state).add_run(chunk)

    def _render_heading(self, doc: Document, element: Heading, indent: int) -> None:
        """Render a heading.

        Always uses doc.add_paragraph(style=...) to respect heading_prefix
        configuration, never doc.add_heading() which ignores it.
        """
        style_name = heading_style_name(self.config.style, element.level.rank)
        paragraph = doc.add_paragraph(style=style_name)
        paragraph.add_run(element.text)
        apply_indent(paragraph, self.config.style, left_chars=indent)

    def _render_unknown(self, doc: Document, element, indent: int, state: _LineState) -> None:
        """Render an element this generator does not know as its JSON."""
        logger.warning("Unknown element type: %s", getattr(element, "type", type(element).__name__))
        if hasattr(element, "model_dump_json"):
            fallback = element.model_dump_json(by_alias=True)
        else:
            fallback = str(element)
        self._body_paragraph(doc, indent, state).add_run(fallback)

    def _body_paragraph(self, doc: Document, indent: int, state: _LineState):
        """Return the open paragraph for this line, creating it if needed."""
        if state.paragraph is None:
            state.paragraph = self._new_paragraph(doc, indent)
        state.has_content = True
        return state.paragraph

    def _new_paragraph(self, doc: Document, indent: int):
        paragraph = doc.add_paragraph(style=self.config.style.body_style)
        apply_indent(paragraph, self.config.style, left_chars=indent)
        return paragraph

    @staticmethod
    def _close_line(state: _LineState) -> None:
        """Mark the line as used so its trailing newline adds no blank paragraph."""
        state.paragraph = None
        state.has_content = True
