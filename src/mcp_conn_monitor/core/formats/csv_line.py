"""Comma-delimited connection-log grammar.

Field order: timestamp, protocol, hostSet, domain, source, ipSet, destination,
then optional sourceAlias and deviceName. The timestamp may carry an inline
severity tag such as ``[INFO]``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import ConnectionRecord, Protocol

_TAG_RE = re.compile(r"\s*\[[A-Za-z]+\]\s*")
_MIN_FIELDS = 7


def normalize_protocol(token: str) -> str:
    """Map tcp/udp in any case to TCP/UDP; keep anything else verbatim."""
    upper = token.strip().upper()
    for proto in Protocol:
        if upper == proto.value:
            return proto.value
    return token


def split_timestamp(token: str) -> tuple[str, str]:
    """Return (display, full) forms of a tagged timestamp token."""
    full = _TAG_RE.sub(" ", token).strip()
    display = full.split(".", 1)[0]
    return display, full


@dataclass(frozen=True, slots=True)
class CsvLineParser:
    """Parse ``ts,proto,hostSet,domain,src,ipSet,dst[,alias[,device]]`` lines."""

    min_fields: int = _MIN_FIELDS

    def parse(self, line: str) -> ConnectionRecord | None:
        tokens = line.strip().split(",")
        if len(tokens) < self.min_fields:
            return None

        display, full = split_timestamp(tokens[0])
        return ConnectionRecord(
            timestamp=display,
            protocol=normalize_protocol(tokens[1]),
            host_set=tokens[2],
            domain=tokens[3],
            source=tokens[4],
            ip_set=tokens[5],
            destination=tokens[6],
            source_alias=tokens[7] if len(tokens) > 7 else "",
            device_name=tokens[8] if len(tokens) > 8 else "",
            raw=line,
            timestamp_full=full,
        )
