"""Indentation block processing.

Turns the scanner's flat element stream into nested ``IndentBlock``s and
folds one-line indent directives into the text that follows them. After
``IndentBlockProcessor.process`` no ``FormattingInstruction`` remains
anywhere in the tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aozora_reader.ir.schema import (
    FormattingInstruction,
    IndentBlock,
    InstructionType,
    LeftIndentedText,
    PlainText,
    Range,
    RightIndentedText,
)

logger = logging.getLogger(__name__)

_LINE_INSTRUCTIONS = (InstructionType.LEFT_INDENT, InstructionType.RIGHT_INDENT)


@dataclass
class _OpenBlock:
    """A block whose end directive has not been seen yet."""

    indent_count: int
    start_range: Range
    elements: list = field(default_factory=list)


class IndentBlockProcessor:
    """Groups block directives into ``IndentBlock``s and merges line directives."""

    def process(self, elements: list) -> list:
        """Run block grouping, then directive+text merging."""
        return self.merge_indent_instructions(self.process_indent_blocks(elements))

    def process_indent_blocks(self, elements: list) -> list:
        """Convert matched start/end directives into nested ``IndentBlock``s.

        Uses an explicit stack of open blocks:
        - A start directive pushes a frame.
        - An end directive pops the top frame and appends the finished block to
          the new top frame, or to the output if the stack is empty. An end
          directive with nothing open is dropped.
        - Everything else, including left/right directives, is appended to the
          top frame or to the output.
        Frames still open at the end are closed innermost first, using their
        start range since no end position exists.

        Args:
            elements: Flat element stream from the scanner.

        Returns:
            Elements with block directives replaced by ``IndentBlock``s.
        """
        result: list = []
        stack: list[_OpenBlock] = []

        def append(element) -> None:
            if stack:
                stack[-1].elements.append(element)
            else:
                result.append(element)

        for element in elements:
            if not isinstance(element, FormattingInstruction):
                append(element)
            elif element.instruction_type == InstructionType.INDENT_START:
                stack.append(
                    _OpenBlock(
                        indent_count=element.indent_count or 1,
                        start_range=element.range,
                    )
                )
            elif element.instruction_type == InstructionType.INDENT_END:
                if not stack:
                    logger.debug("Ignoring block end at %d with no open block", element.range.start.index)
                    continue
                frame = stack.pop()
                append(_close(frame, Range(start=frame.start_range.start, end=element.range.end)))
            else:
                # left/right directives wait for merge_indent_instructions
                append(element)

        if stack:
            logger.debug("Auto-closing %d unterminated indent block(s)", len(stack))
        while stack:
            frame = stack.pop()
            append(_close(frame, frame.start_range))

        return result

    def merge_indent_instructions(self, elements: list) -> list:
        """Fold each left/right directive into the text element right after it.

        A directive not directly followed by a ``PlainText`` is dropped.
        Recurses into indent blocks.
        """
        result: list = []
        i = 0
        while i < len(elements):
            element = elements[i]

            if isinstance(element, IndentBlock):
                element.elements = self.merge_indent_instructions(element.elements)
                result.append(element)
            elif isinstance(element, FormattingInstruction):
                following = elements[i + 1] if i + 1 < len(elements) else None
                if element.instruction_type in _LINE_INSTRUCTIONS and isinstance(following, PlainText):
                    result.append(_merge(element, following))
                    i += 1
                else:
                    logger.debug("Dropping %s directive without following text", element.instruction_type.value)
            else:
                result.append(element)

            i += 1

        return result


def _merge(instruction: FormattingInstruction, text: PlainText):
    cls = LeftIndentedText if instruction.instruction_type == InstructionType.LEFT_INDENT else RightIndentedText
    return cls(
        content=text.content,
        indent_count=instruction.indent_count or 0,
        range=Range(start=instruction.range.start, end=text.range.end),
    )


def _close(frame: _OpenBlock, block_range: Range) -> IndentBlock:
    # Skips validation: the block may still hold left/right directives
    # until merge_indent_instructions folds them away.
    return IndentBlock.model_construct(
        indent_count=frame.indent_count,
        elements=frame.elements,
        range=block_range,
    )
