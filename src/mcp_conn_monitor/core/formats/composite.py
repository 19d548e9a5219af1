"""Parser composition utilities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..models import ConnectionRecord
from .base import RecordParser


@dataclass(frozen=True, slots=True)
class CompositeParser:
    """Try parsers in order and return the first successful parse."""

    parsers: Sequence[RecordParser]

    def parse(self, line: str) -> ConnectionRecord | None:
        """Return the first successful parse from the configured parsers."""
        for p in self.parsers:
            out = p.parse(line)
            if out is not None:
                return out
        return None
