"""Exception hierarchy for the Aozora reader."""


class AozoraReaderError(Exception):
    """Base exception for all aozora-reader errors."""


class ParseError(AozoraReaderError):
    """Raised when a document cannot be parsed at all."""


class FileSizeLimitError(ParseError):
    """Raised when the decoded text exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File size exceeds maximum limit of {limit} bytes (got {size})"
        )


class EncodingError(AozoraReaderError):
    """Raised when input bytes are binary or cannot be read."""


class GenerationError(AozoraReaderError):
    """Raised when Word document generation fails."""


class ConfigError(AozoraReaderError):
    """Raised when configuration is invalid or missing."""


class ImageError(GenerationError):
    """Raised when an image cannot be loaded or embedded."""
