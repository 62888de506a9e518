"""Parsed document models."""

from aozora_reader.ir.schema import (
    BlockElement,
    Caption,
    DocumentMetadata,
    Element,
    FormattingInstruction,
    Heading,
    HeadingLevel,
    Image,
    IndentBlock,
    InstructionType,
    LeftIndentedText,
    ParsedDocument,
    PlainText,
    Position,
    Range,
    RightIndentedText,
    RubyText,
    iter_elements,
)

__all__ = [
    "BlockElement",
    "Caption",
    "DocumentMetadata",
    "Element",
    "FormattingInstruction",
    "Heading",
    "HeadingLevel",
    "Image",
    "IndentBlock",
    "InstructionType",
    "LeftIndentedText",
    "ParsedDocument",
    "PlainText",
    "Position",
    "Range",
    "RightIndentedText",
    "RubyText",
    "iter_elements",
]
