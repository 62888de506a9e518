"""Final cleanup of the element stream.

Drops whitespace-only text runs that are not line-boundary markers and
merges adjacent text runs, but only where the merge cannot undo the fine
splitting the scanner does ahead of single-character ruby.
"""

from __future__ import annotations

from aozora_reader.ir.schema import IndentBlock, PlainText, Range


def cleanup_elements(elements: list) -> list:
    """Return a cleaned copy of ``elements``; the input is not modified.

    Two adjacent ``PlainText`` runs are merged only if both are exactly
    ``"\\n"``, or both are longer than one character and neither contains a
    newline. Single-character runs stay separate. Indent blocks are cleaned
    recursively. Applying this twice gives the same result as once.
    """
    cleaned: list = []

    for element in elements:
        if isinstance(element, IndentBlock):
            cleaned.append(element.model_copy(update={"elements": cleanup_elements(element.elements)}))
            continue

        if not isinstance(element, PlainText):
            cleaned.append(element)
            continue

        if _is_noise(element):
            continue

        previous = cleaned[-1] if cleaned else None
        if isinstance(previous, PlainText) and _can_merge(previous, element):
            cleaned[-1] = previous.model_copy(
                update={
                    "content": previous.content + element.content,
                    "range": Range(start=previous.range.start, end=element.range.end),
                }
            )
            continue

        cleaned.append(element)

    return cleaned


def _is_noise(text: PlainText) -> bool:
    return text.content.strip() == "" and not text.is_newline


def _can_merge(first: PlainText, second: PlainText) -> bool:
    if first.content == "\n" and second.content == "\n":
        return True
    return (
        len(first.content) > 1
        and len(second.content) > 1
        and "\n" not in first.content
        and "\n" not in second.content
    )
