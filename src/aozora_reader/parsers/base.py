"""Abstract base class for notation parsers and the shared match result."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

from aozora_reader.config import Config
from aozora_reader.ir.schema import ParsedDocument


class RecognizerMatch(NamedTuple):
    """A recognized element and how many characters of input it consumed."""

    element: object
    length: int


class EncodingInfo(NamedTuple):
    """What the file-loading layer learned about the text's encoding."""

    encoding: str
    confidence: Optional[float] = None
    has_bom: Optional[bool] = None
    is_valid_encoding: Optional[bool] = None

    @classmethod
    def from_result(cls, result) -> EncodingInfo:
        """Build from an ``EncodingResult`` returned by the detector."""
        return cls(
            encoding=result.encoding.value,
            confidence=result.confidence,
            has_bom=result.has_bom,
            is_valid_encoding=result.is_valid,
        )


class BaseTextParser(ABC):
    """Base class that all text parser implementations must extend."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config.default()

    @abstractmethod
    def parse(
        self,
        text: str,
        filename: str,
        encoding_info: EncodingInfo | None = None,
    ) -> ParsedDocument:
        """Parse decoded text and return its document model.

        Args:
            text: The decoded document text.
            filename: Name of the source file, recorded in metadata.
            encoding_info: Optional encoding detection result.

        Returns:
            A ParsedDocument.

        Raises:
            FileSizeLimitError: If the text exceeds the configured maximum.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the parser engine name (e.g. 'aozora')."""
