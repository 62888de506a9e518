"""Pydantic models for the parsed Aozora document.

Elements form a closed tagged union discriminated by the ``type`` field.
``IndentBlock`` nests other elements recursively. ``FormattingInstruction``
only exists between scanning and block processing and never appears in a
finished ``ParsedDocument``. This is the contract handed to renderers.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    """Shared settings: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


class Position(_Model):
    """A point in the decoded text. ``index`` is the authoritative offset."""

    line: int = 0
    column: int = 0
    index: int = 0


class Range(_Model):
    """Half-open span ``[start.index, end.index)`` in the original text."""

    start: Position
    end: Position

    @classmethod
    def span(cls, start: int, end: int) -> Range:
        """Build a range from absolute offsets (line/column filled in later)."""
        return cls(
            start=Position(column=start, index=start),
            end=Position(column=end, index=end),
        )

    @property
    def length(self) -> int:
        return self.end.index - self.start.index


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class HeadingLevel(str, Enum):
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"

    @property
    def rank(self) -> int:
        """Numeric depth: large=1, medium=2, small=3."""
        return {"large": 1, "medium": 2, "small": 3}[self.value]


class InstructionType(str, Enum):
    INDENT_START = "indent-start"
    INDENT_END = "indent-end"
    LEFT_INDENT = "left-indent"
    RIGHT_INDENT = "right-indent"


# ---------------------------------------------------------------------------
# Element variants (discriminated union via `type` field)
# ---------------------------------------------------------------------------


class RubyText(_Model):
    """Base text annotated with a phonetic reading."""

    type: Literal["ruby"] = "ruby"
    text: str
    ruby: str
    range: Range


class Heading(_Model):
    type: Literal["heading"] = "heading"
    level: HeadingLevel
    text: str
    id: str
    range: Range


class Image(_Model):
    type: Literal["image"] = "image"
    description: str = ""
    filename: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    base64: Optional[str] = None
    range: Range


class Caption(_Model):
    type: Literal["caption"] = "caption"
    text: str
    range: Range


class PlainText(_Model):
    """A plain run of text, or a ``"\\n"`` line-boundary marker."""

    type: Literal["text"] = "text"
    content: str
    range: Range

    @property
    def is_newline(self) -> bool:
        return self.content != "" and self.content.strip("\n") == ""


class LeftIndentedText(_Model):
    type: Literal["left-indented-text"] = "left-indented-text"
    content: str
    indent_count: int
    range: Range


class RightIndentedText(_Model):
    type: Literal["right-indented-text"] = "right-indented-text"
    content: str
    indent_count: int
    range: Range


class FormattingInstruction(_Model):
    """Intermediate directive element consumed by block processing."""

    type: Literal["formatting-instruction"] = "formatting-instruction"
    instruction: str
    instruction_type: InstructionType
    indent_count: Optional[int] = None
    range: Range


class IndentBlock(_Model):
    """A run of elements indented together; may contain nested blocks."""

    type: Literal["indent-block"] = "indent-block"
    indent_count: int
    elements: list[BlockElement] = Field(default_factory=list)
    range: Range


# Everything that may appear in a finished document
BlockElement = Annotated[
    Union[
        RubyText,
        Heading,
        Image,
        Caption,
        PlainText,
        LeftIndentedText,
        RightIndentedText,
        IndentBlock,
    ],
    Field(discriminator="type"),
]

# Everything the scanner and block processor pass between them
Element = Annotated[
    Union[
        RubyText,
        Heading,
        Image,
        Caption,
        PlainText,
        LeftIndentedText,
        RightIndentedText,
        IndentBlock,
        FormattingInstruction,
    ],
    Field(discriminator="type"),
]

# Rebuild IndentBlock now that BlockElement is defined (recursive reference)
IndentBlock.model_rebuild()


def iter_elements(elements: list) -> Iterator:
    """Yield every element depth-first, descending into indent blocks."""
    for element in elements:
        yield element
        if isinstance(element, IndentBlock):
            yield from iter_elements(element.elements)


# ---------------------------------------------------------------------------
# Document metadata
# ---------------------------------------------------------------------------


class DocumentMetadata(_Model):
    filename: str = ""
    file_size: int = 0
    encoding: str = "utf-8"
    encoding_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    has_bom: Optional[bool] = None
    is_valid_encoding: Optional[bool] = None
    parse_time_ms: float = 0.0
    element_count: int = 0
    character_count: int = 0


# ---------------------------------------------------------------------------
# Top-level document
# ---------------------------------------------------------------------------


class ParsedDocument(_Model):
    """The complete result of parsing one Aozora text."""

    title: Optional[str] = None
    author: Optional[str] = None
    elements: list[BlockElement] = Field(default_factory=list)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)

    @computed_field
    @property
    def headings(self) -> list[Heading]:
        """All headings in document order, including those inside blocks."""
        return [e for e in iter_elements(self.elements) if isinstance(e, Heading)]

    @computed_field
    @property
    def images(self) -> list[Image]:
        """All images in document order, including those inside blocks."""
        return [e for e in iter_elements(self.elements) if isinstance(e, Image)]

    def table_of_contents(self):
        """Return the headings nested into a navigation tree."""
        from aozora_reader.ir.toc import build_heading_tree

        return build_heading_tree(self.headings)

    def to_json(self, **kwargs) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(indent=2, by_alias=True, **kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> ParsedDocument:
        """Deserialize from JSON string."""
        return cls.model_validate_json(json_str)
