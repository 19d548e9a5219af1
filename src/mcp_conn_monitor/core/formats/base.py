"""Parser interface for connection-log lines."""

from __future__ import annotations

from typing import Protocol

from ..models import ConnectionRecord


class RecordParser(Protocol):
    """Parser interface: return a ConnectionRecord if the line matches, else None."""

    def parse(self, line: str) -> ConnectionRecord | None:
        """Parse a log line into a ConnectionRecord if recognized."""
        ...
