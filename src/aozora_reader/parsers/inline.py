"""Recognizers for inline Aozora notations.

Every recognizer is a prefix matcher over the unconsumed rest of a line and
returns a ``RecognizerMatch`` or ``None``. ``InlineNotationParser.recognizers``
fixes the order they are tried in, which decides how overlapping notations
are disambiguated:

1. ruby        ``｜我輩《わがはい》`` (explicit range) or ``猫《ねこ》`` (one base character)
2. heading     ``第一章［＃「第一章」は大見出し］``
3. image       ``［＃挿絵（fig01.png、横320×縦240）入る］``
4. caption     ``図１［＃「図１」はキャプション］``
5. plain text  everything up to the next special character
"""

from __future__ import annotations

import re
from typing import Optional

from aozora_reader.config import ParserConfig
from aozora_reader.ir.schema import (
    Caption,
    Heading,
    HeadingLevel,
    Image,
    PlainText,
    Range,
    RubyText,
)
from aozora_reader.parsers.base import RecognizerMatch
from aozora_reader.parsers.instructions import parse_count


RUBY_OPEN = "《"
BRACKET_OPEN = "［"

_EXPLICIT_RUBY_RE = re.compile(r"^｜([^《]+)《([^》]+)》")
_SINGLE_RUBY_RE = re.compile(r"^([^｜［《\s])《([^》]+)》")

_HEADING_RE = re.compile(r"^([^［]+)［＃「([^」]+)」は(大|中|小)見出し］")
_CAPTION_RE = re.compile(r"^([^［]+)［＃「([^」]+)」はキャプション］")

_IMAGE_SIZED_RE = re.compile(
    r"^［＃([^（］]+)（([^、）]+)、横([0-9０-９]+)×縦([0-9０-９]+)）入る］"
)
_IMAGE_RE = re.compile(r"^［＃([^（］]+)（([^）]+)）入る］")

_SPECIAL_CHARS_RE = re.compile(r"[｜［《》]")
_HEADING_DIRECTIVE_RE = re.compile(r"［＃「([^」]+)」は(?:大|中|小)見出し］")
_CAPTION_DIRECTIVE_RE = re.compile(r"［＃「([^」]+)」はキャプション］")

_HEADING_LEVELS = {
    "大": HeadingLevel.LARGE,
    "中": HeadingLevel.MEDIUM,
    "小": HeadingLevel.SMALL,
}


def slugify(text: str) -> str:
    """Turn heading text into an id fragment (not yet unique)."""
    slug = re.sub(r"[^\w\s-]", "", text).strip()
    slug = re.sub(r"\s+", "-", slug).lower()
    return slug or "heading"


class InlineNotationParser:
    """Matches ruby, heading, image, caption and plain-text notations."""

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()

    def recognizers(self):
        """All inline matchers in priority order; plain text comes last."""
        return [
            self.parse_ruby,
            self.parse_heading,
            self.parse_image,
            self.parse_caption,
            self.parse_plain_text,
        ]

    # ------------------------------------------------------------------
    # Ruby
    # ------------------------------------------------------------------

    def parse_ruby(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        """Match explicit-range ruby first, then single-character ruby.

        ``｜雑誌《ざっし》`` annotates everything after the range marker, while
        ``誌《し》`` annotates exactly one character. Multi-character words
        therefore need the marker.
        """
        if not self.config.enable_ruby:
            return None

        match = _EXPLICIT_RUBY_RE.match(text) or _SINGLE_RUBY_RE.match(text)
        if not match:
            return None

        length = match.end()
        return RecognizerMatch(
            RubyText(
                text=match.group(1),
                ruby=match.group(2),
                range=Range.span(offset, offset + length),
            ),
            length,
        )

    # ------------------------------------------------------------------
    # Directives that annotate preceding text
    # ------------------------------------------------------------------

    def parse_heading(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        if not self.config.enable_headings:
            return None

        match = _match_annotated_run(_HEADING_RE, text)
        if not match:
            return None

        length = match.end()
        target = match.group(2)
        return RecognizerMatch(
            Heading(
                level=_HEADING_LEVELS[match.group(3)],
                text=target,
                id=slugify(target),
                range=Range.span(offset, offset + length),
            ),
            length,
        )

    def parse_caption(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        if not self.config.enable_captions:
            return None

        match = _match_annotated_run(_CAPTION_RE, text)
        if not match:
            return None

        length = match.end()
        return RecognizerMatch(
            Caption(text=match.group(2), range=Range.span(offset, offset + length)),
            length,
        )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def parse_image(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        if not self.config.enable_images:
            return None

        match = _IMAGE_SIZED_RE.match(text)
        if match:
            description, filename, width, height = match.groups()
            image = Image(
                description=description.strip(),
                filename=filename.strip(),
                width=parse_count(width),
                height=parse_count(height),
                range=Range.span(offset, offset + match.end()),
            )
            return RecognizerMatch(image, match.end())

        match = _IMAGE_RE.match(text)
        if match:
            description, filename = match.groups()
            image = Image(
                description=description.strip(),
                filename=filename.strip(),
                range=Range.span(offset, offset + match.end()),
            )
            return RecognizerMatch(image, match.end())

        return None

    # ------------------------------------------------------------------
    # Plain text
    # ------------------------------------------------------------------

    def parse_plain_text(self, text: str, offset: int) -> Optional[RecognizerMatch]:
        """Consume text up to the next special character (at least one char).

        When the special character is ``《`` and more than one character
        precedes it, the last of those characters is held back so the next
        scan step can match it as single-character ruby.
        """
        if not text:
            return None

        special = _SPECIAL_CHARS_RE.search(text)
        if special is None:
            end = len(text)
        else:
            end = special.start()
            if text[end] == RUBY_OPEN and end > 1:
                end -= 1
            elif text[end] == BRACKET_OPEN and end > 0:
                end = self._annotated_run_boundary(text, end)
            end = max(end, 1)

        return RecognizerMatch(
            PlainText(content=text[:end], range=Range.span(offset, offset + end)),
            end,
        )

    def _annotated_run_boundary(self, text: str, bracket: int) -> int:
        """Stop before the text a following heading/caption directive quotes.

        ``前文。第一章［＃「第一章」は大見出し］`` yields ``前文。`` here so that
        ``第一章`` starts the next scan step and matches as a heading.
        """
        patterns = []
        if self.config.enable_headings:
            patterns.append(_HEADING_DIRECTIVE_RE)
        if self.config.enable_captions:
            patterns.append(_CAPTION_DIRECTIVE_RE)

        lead = text[:bracket]
        for pattern in patterns:
            directive = pattern.match(text, bracket)
            if directive:
                target = directive.group(1)
                if len(lead) > len(target) and lead.endswith(target):
                    return bracket - len(target)
        return bracket


def _match_annotated_run(pattern: re.Pattern, text: str) -> Optional[re.Match]:
    """Match ``run［＃「target」…］`` unless ``run`` merely ends with ``target``.

    In that case the plain-text recognizer splits the extra leading text off
    first, and the directive matches on the next scan step.
    """
    match = pattern.match(text)
    if not match:
        return None

    run, target = match.group(1), match.group(2)
    if run != target and run.endswith(target):
        return None
    return match
