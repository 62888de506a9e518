"""Character encoding detection for Aozora text files.

Aozora Bunko texts circulate as UTF-8 (with or without BOM) and as the
legacy Shift-JIS encoding. ``detect_and_decode`` tries strict UTF-8 first,
then Shift-JIS, scoring each attempt with a confidence in ``[0, 1]``.
It never raises: an undecidable input comes back with ``is_valid=False``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
BINARY_SAMPLE_SIZE = 8000
BINARY_NULL_RATIO = 0.01

UTF8_ACCEPT_THRESHOLD = 0.8
UTF8_VALID_THRESHOLD = 0.7
SJIS_ACCEPT_THRESHOLD = 0.6
FALLBACK_CONFIDENCE = 0.1

# Hiragana, Katakana and CJK unified ideographs
_JAPANESE_RE = re.compile("[\u3040-\u309f\u30a0-\u30ff\u4e00-\u9faf]")
_REPLACEMENT_CHAR = "\ufffd"


class SupportedEncoding(str, Enum):
    UTF_8 = "utf-8"
    SHIFT_JIS = "shift-jis"

    @property
    def codec(self) -> str:
        """Python codec name used to decode this encoding."""
        # cp932 is the Windows superset actually used for Japanese "Shift-JIS" files
        return {"utf-8": "utf-8", "shift-jis": "cp932"}[self.value]


@dataclass(frozen=True)
class EncodingResult:
    """Decoded text plus how much the detector trusts it."""

    encoding: SupportedEncoding
    confidence: float
    text: str
    is_valid: bool
    has_bom: bool = False


def is_binary_file(data: bytes) -> bool:
    """Return True if more than 1% of the first 8000 bytes are NUL."""
    sample = data[:BINARY_SAMPLE_SIZE]
    if not sample:
        return False
    return sample.count(0) / len(sample) > BINARY_NULL_RATIO


def has_utf8_bom(data: bytes) -> bool:
    return data.startswith(UTF8_BOM)


def detect_and_decode(data: bytes) -> EncodingResult:
    """Detect the encoding of ``data`` and decode it.

    Args:
        data: Raw file bytes.

    Returns:
        The accepted UTF-8 or Shift-JIS decoding, or a low-confidence
        UTF-8 fallback with ``is_valid=False`` when neither is convincing.
    """
    has_bom = has_utf8_bom(data)

    utf8 = _try_utf8(data, has_bom)
    if utf8.is_valid and utf8.confidence >= UTF8_ACCEPT_THRESHOLD:
        logger.debug("Accepted UTF-8 (confidence %.2f, bom=%s)", utf8.confidence, has_bom)
        return utf8

    sjis = _try_shift_jis(data)
    if sjis.is_valid:
        logger.debug("Accepted Shift-JIS (confidence %.2f)", sjis.confidence)
        return sjis

    logger.warning(
        "Could not determine encoding (utf-8 %.2f, shift-jis %.2f); decoding as UTF-8",
        utf8.confidence,
        sjis.confidence,
    )
    return replace(utf8, confidence=FALLBACK_CONFIDENCE, is_valid=False)


def _try_utf8(data: bytes, has_bom: bool) -> EncodingResult:
    payload = data[len(UTF8_BOM):] if has_bom else data
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        # Keep a lenient decoding around as the best-effort fallback text
        return EncodingResult(
            encoding=SupportedEncoding.UTF_8,
            confidence=0.0,
            text=payload.decode("utf-8", errors="replace"),
            is_valid=False,
            has_bom=has_bom,
        )

    confidence = utf8_confidence(text)
    return EncodingResult(
        encoding=SupportedEncoding.UTF_8,
        confidence=confidence,
        text=text,
        is_valid=confidence >= UTF8_VALID_THRESHOLD,
        has_bom=has_bom,
    )


def _try_shift_jis(data: bytes) -> EncodingResult:
    text = data.decode(SupportedEncoding.SHIFT_JIS.codec, errors="replace")
    confidence = shift_jis_confidence(text, data)
    return EncodingResult(
        encoding=SupportedEncoding.SHIFT_JIS,
        confidence=confidence,
        text=text,
        is_valid=confidence >= SJIS_ACCEPT_THRESHOLD,
        has_bom=False,
    )


def utf8_confidence(text: str) -> float:
    """Score how plausible ``text`` is as a UTF-8 decoding."""
    if not text:
        return 0.8

    confidence = 0.5

    non_ascii = sum(1 for ch in text if ord(ch) > 0x7F)
    if non_ascii == 0:
        # ASCII is valid UTF-8 but says nothing about the real encoding
        confidence = 0.8

    if _JAPANESE_RE.search(text):
        confidence += 0.3

    if _REPLACEMENT_CHAR in text:
        confidence -= 0.4

    if non_ascii / len(text) > 0.1:
        confidence += 0.2

    return _clamp(confidence)


def shift_jis_confidence(text: str, data: bytes) -> float:
    """Score how plausible ``text`` is as a Shift-JIS decoding of ``data``."""
    confidence = 0.4

    if _JAPANESE_RE.search(text):
        confidence += 0.4

    if _REPLACEMENT_CHAR in text:
        confidence -= 0.3

    confidence += shift_jis_byte_score(data)
    return _clamp(confidence)


def shift_jis_byte_score(data: bytes) -> float:
    """Reward valid Shift-JIS lead/trail byte pairs, up to 0.3."""
    score = 0.0
    i = 0
    length = len(data)
    while i < length:
        byte = data[i]
        if (0x81 <= byte <= 0x9F or 0xE0 <= byte <= 0xFC) and i + 1 < length:
            trail = data[i + 1]
            if 0x40 <= trail <= 0x7E or 0x80 <= trail <= 0xFC:
                score += 0.01
                if score >= 0.3:
                    break
                i += 1
        i += 1
    return min(0.3, score)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
