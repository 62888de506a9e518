"""Recognizers for indentation directives.

Each ``parse_*`` method is a prefix matcher: it only looks at the start of
``text`` and returns a ``RecognizerMatch`` wrapping a
``FormattingInstruction`` or ``None``. Directives handled:

    ［＃２字上げ］            left indent
    ［＃地から２字上げ］      right indent (measured from the baseline end)
    ［＃ここから２字下げ］    start of an indented block
    ［＃ここで字下げ終わり］  end of an indented block

Counts may be written with full-width or half-width digits.
"""

from __future__ import annotations

import re
from typing import Optional

from aozora_reader.ir.schema import FormattingInstruction, InstructionType, Range
from aozora_reader.parsers.base import RecognizerMatch

_FULLWIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")

_LEFT_INDENT_RE = re.compile(r"^［＃([０-９0-9]+)字上げ］")
_RIGHT_INDENT_RE = re.compile(r"^［＃地から([０-９0-9]+)字上げ］")
_BLOCK_START_RE = re.compile(r"^［＃ここから([０-９0-9]+)字下げ］")
_BLOCK_END_RE = re.compile(r"^［＃ここで字下げ終わり］")
_LEADING_ASCII_SPACE_RE = re.compile(r"^[ \t]+")


def normalize_numerals(digits: str) -> str:
    """Convert full-width digits to their ASCII equivalents."""
    return digits.translate(_FULLWIDTH_DIGITS)


def parse_count(digits: str) -> int:
    return int(normalize_numerals(digits), 10)


class FormattingInstructionParser:
    """Matches indentation directives at the start of a string."""

    def __init__(self, max_indent_count: int = 20):
        self.max_indent_count = max_indent_count

    def parse_left_indent(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        return self._parse_counted(text, offset, _LEFT_INDENT_RE, InstructionType.LEFT_INDENT)

    def parse_right_indent(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        return self._parse_counted(text, offset, _RIGHT_INDENT_RE, InstructionType.RIGHT_INDENT)

    def parse_block_indent_start(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        """Match a block start; counts above ``max_indent_count`` are clamped."""
        return self._parse_counted(
            text, offset, _BLOCK_START_RE, InstructionType.INDENT_START, clamp=True
        )

    def parse_block_indent_end(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        match = _BLOCK_END_RE.match(text)
        if not match:
            return None

        instruction = match.group(0)
        return RecognizerMatch(
            FormattingInstruction(
                instruction=instruction,
                instruction_type=InstructionType.INDENT_END,
                range=Range.span(offset, offset + len(instruction)),
            ),
            len(instruction),
        )

    def recognizers(self):
        """All directive matchers in the order the scanner must try them."""
        return [
            self.parse_left_indent,
            self.parse_right_indent,
            self.parse_block_indent_start,
            self.parse_block_indent_end,
        ]

    @staticmethod
    def preserve_leading_spaces(line: str) -> str:
        """Strip leading ASCII spaces and tabs, keeping full-width spaces."""
        return _LEADING_ASCII_SPACE_RE.sub("", line)

    def _parse_counted(
        self,
        text: str,
        offset: int,
        pattern: re.Pattern,
        instruction_type: InstructionType,
        clamp: bool = False,
    ) -> Optional[RecognizerMatch]:
        match = pattern.match(text)
        if not match:
            return None

        count = parse_count(match.group(1))
        if count <= 0:
            return None
        if clamp:
            count = min(count, self.max_indent_count)

        instruction = match.group(0)
        return RecognizerMatch(
            FormattingInstruction(
                instruction=instruction,
                instruction_type=instruction_type,
                indent_count=count,
                range=Range.span(offset, offset + len(instruction)),
            ),
            len(instruction),
        )
