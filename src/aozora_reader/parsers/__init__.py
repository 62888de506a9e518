"""Aozora notation parser implementations."""

from aozora_reader.parsers.aozora_parser import AozoraParser
from aozora_reader.parsers.base import BaseTextParser, EncodingInfo
from aozora_reader.parsers.factory import create_parser

__all__ = ["AozoraParser", "BaseTextParser", "EncodingInfo", "create_parser"]
