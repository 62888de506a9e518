"""Encoding detection for raw text files."""

from aozora_reader.encoding.detector import (
    EncodingResult,
    SupportedEncoding,
    detect_and_decode,
    is_binary_file,
)

__all__ = [
    "EncodingResult",
    "SupportedEncoding",
    "detect_and_decode",
    "is_binary_file",
]
