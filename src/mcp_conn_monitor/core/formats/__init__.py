"""Connection-log line grammars.

Contains the comma-delimited connection grammar and the legacy SNI grammar.
"""

from __future__ import annotations

from ..models import ConnectionRecord
from .base import RecordParser
from .composite import CompositeParser
from .csv_line import CsvLineParser, normalize_protocol, split_timestamp
from .sni import SniLineParser


def default_parser() -> RecordParser:
    """Default parser chain (first match wins)."""
    return CompositeParser(parsers=[CsvLineParser(), SniLineParser()])


def parse(line: str) -> ConnectionRecord | None:
    """Parse one raw line with the default chain; never raises."""
    return _DEFAULT.parse(line)


_DEFAULT = default_parser()

__all__ = [
    "CompositeParser",
    "CsvLineParser",
    "RecordParser",
    "SniLineParser",
    "default_parser",
    "normalize_protocol",
    "parse",
    "split_timestamp",
]
