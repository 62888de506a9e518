"""YAML-backed configuration for the Aozora reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from aozora_reader.exceptions import ConfigError

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB


@dataclass
class ParserConfig:
    """Notation feature toggles and parser limits."""

    engine: str = "aozora"
    enable_ruby: bool = True
    enable_headings: bool = True
    enable_images: bool = True
    enable_captions: bool = True
    enable_emphasis: bool = True  # reserved, no emphasis notation is parsed yet
    enable_text_formatting: bool = True
    preserve_leading_spaces: bool = True
    max_indent_count: int = 20
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    strict_mode: bool = False  # reserved


@dataclass
class StyleConfig:
    """Word document style mappings."""

    heading_prefix: str = "Heading"  # e.g. "Heading 1" for large headings
    body_style: str = "Normal"
    caption_style: str = "Caption"
    ruby_format: str = "（{ruby}）"  # reading appended after the base text
    ruby_font_size_pt: float = 6.0
    indent_unit_pt: float = 10.5  # width of one full-width character


@dataclass
class ImageConfig:
    """Image handling settings."""

    max_width_inches: float = 6.0
    max_height_inches: float = 8.0
    placeholder_text: str = "[Image not available: {description}]"


@dataclass
class Config:
    """Top-level reader configuration."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    style: StyleConfig = field(default_factory=StyleConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        """Load configuration from a YAML file."""
        try:
            text = path.read_text(encoding="utf-8")
            data = yaml.safe_load(text) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path}")
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}")

        return cls._from_dict(data)

    @classmethod
    def from_yaml_string(cls, text: str) -> Config:
        """Load configuration from a YAML string."""
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> Config:
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

        parser_data = data.get("parser") or {}
        style_data = data.get("style") or {}
        image_data = data.get("image") or {}

        parser = ParserConfig(**{k: v for k, v in parser_data.items() if k in ParserConfig.__dataclass_fields__})
        if parser.max_indent_count < 1:
            raise ConfigError(f"parser.max_indent_count must be >= 1, got {parser.max_indent_count}")
        if parser.max_file_size < 0:
            raise ConfigError(f"parser.max_file_size must be >= 0, got {parser.max_file_size}")

        return cls(
            parser=parser,
            style=StyleConfig(**{k: v for k, v in style_data.items() if k in StyleConfig.__dataclass_fields__}),
            image=ImageConfig(**{k: v for k, v in image_data.items() if k in ImageConfig.__dataclass_fields__}),
            verbose=data.get("verbose", False),
        )

    @classmethod
    def default(cls) -> Config:
        """Return the default configuration."""
        return cls()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Load config from path, or return defaults if path is None."""
        if path is None:
            return cls.default()
        return cls.from_yaml(path)
