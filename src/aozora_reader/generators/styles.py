"""Word style helpers for rendering Aozora documents.

Handles heading style names, caption formatting, character-width
indentation and inline ruby runs.
"""

from __future__ import annotations

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from aozora_reader.config import StyleConfig


def heading_style_name(config: StyleConfig, rank: int) -> str:
    """Return the Word style name for a heading rank (e.g. 'Heading 1')."""
    return f"{config.heading_prefix} {rank}"


def apply_indent(
    paragraph, config: StyleConfig, left_chars: int = 0, right_chars: int = 0
) -> None:
    """Indent a paragraph by a number of full-width character widths."""
    if left_chars:
        paragraph.paragraph_format.left_indent = Pt(config.indent_unit_pt * left_chars)
    if right_chars:
        paragraph.paragraph_format.right_indent = Pt(config.indent_unit_pt * right_chars)


def align_right(paragraph) -> None:
    paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT


def add_ruby(paragraph, text: str, ruby: str, config: StyleConfig) -> None:
    """Write base text followed by its reading in a smaller run."""
    paragraph.add_run(text)
    reading = paragraph.add_run(config.ruby_format.format(ruby=ruby))
    reading.font.size = Pt(config.ruby_font_size_pt)


def apply_caption_formatting(paragraph, config: StyleConfig) -> None:
    """Apply caption formatting (italic, centred) to a paragraph."""
    paragraph.style = doc_style_or_fallback(
        paragraph.part.document, config.caption_style, config.body_style
    )
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    for run in paragraph.runs:
        run.italic = True


def doc_style_or_fallback(
    doc: Document, style_name: str, fallback: str = "Normal"
) -> str:
    """Return style_name if it exists in doc, otherwise fallback."""
    try:
        doc.styles[style_name]
        return style_name
    except KeyError:
        return fallback
