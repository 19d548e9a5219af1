"""Legacy SNI line grammar.

Example::

    2025/10/13 22:41:12.466126 [INFO] SNI TCP: assets.example.com 192.168.1.100:38894 -> 92.123.206.67:443
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import ConnectionRecord
from .csv_line import normalize_protocol, split_timestamp

TARGET_MARKER = "target"


@dataclass(frozen=True, slots=True)
class SniLineParser:
    """Parse '<ts> [LEVEL] SNI <PROTO>[ TARGET]: <domain> <src> -> <dst>' lines."""

    _re = re.compile(
        r"^(?P<ts>\d{4}[/-]\d{2}[/-]\d{2} \d{2}:\d{2}:\d{2}(?:\.\d+)?)\s+\[[A-Za-z]+\]\s+"
        r"SNI\s+(?P<proto>[A-Za-z]+)(?P<target>\s+TARGET)?:\s+"
        r"(?P<domain>\S+)\s+(?P<src>\S+)\s+->\s+(?P<dst>\S+)$"
    )

    def parse(self, line: str) -> ConnectionRecord | None:
        m = self._re.match(line.strip())
        if not m:
            return None

        display, full = split_timestamp(m.group("ts"))
        return ConnectionRecord(
            timestamp=display,
            protocol=normalize_protocol(m.group("proto")),
            host_set=TARGET_MARKER if m.group("target") else "",
            domain=m.group("domain"),
            source=m.group("src"),
            ip_set="",
            destination=m.group("dst"),
            raw=line,
            timestamp_full=full,
        )
