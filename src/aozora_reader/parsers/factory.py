"""Parser factory: selects a parser implementation based on config."""

from __future__ import annotations

from aozora_reader.config import Config
from aozora_reader.exceptions import ConfigError
from aozora_reader.parsers.base import BaseTextParser


def create_parser(config: Config | None = None) -> BaseTextParser:
    """Create a parser instance based on config.

    Args:
        config: Reader configuration. Uses default if None.

    Returns:
        A BaseTextParser implementation.

    Raises:
        ConfigError: If the configured engine is unknown.
    """
    config = config or Config.default()
    engine = config.parser.engine.lower()

    if engine == "aozora":
        from aozora_reader.parsers.aozora_parser import AozoraParser

        return AozoraParser(config)
    else:
        raise ConfigError(
            f"Unknown parser engine: '{engine}'. Available: aozora"
        )
