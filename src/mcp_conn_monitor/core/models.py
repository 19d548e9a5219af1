"""Core data models for connection monitoring."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

_TS_FORMATS = ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M:%S")
_FRACTION_RE = re.compile(r"\.(\d+)$")


class Protocol(str, Enum):
    """Known transport protocols (other tokens are kept verbatim)."""

    TCP = "TCP"
    UDP = "UDP"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"
    NONE = "none"


class SortColumn(str, Enum):
    """Columns the connection view can be ordered by."""

    TIMESTAMP = "timestamp"
    SET = "set"
    PROTOCOL = "protocol"
    DOMAIN = "domain"
    SOURCE = "source"
    DESTINATION = "destination"


def parse_instant(value: str) -> datetime | None:
    """Parse a logged wall-clock timestamp ('/' or '-' date separators)."""
    s = value.strip().replace("/", "-")
    if not s:
        return None
    # strptime %f takes at most 6 digits
    m = _FRACTION_RE.search(s)
    if m and len(m.group(1)) > 6:
        s = s[: m.start(1) + 6]
    for fmt in _TS_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


@dataclass(frozen=True, slots=True)
class ConnectionRecord:
    """One observed flow event parsed from a connection-log line."""

    timestamp: str  # display form, whole seconds
    protocol: str
    host_set: str
    domain: str
    source: str
    ip_set: str
    destination: str
    source_alias: str = ""
    device_name: str = ""
    raw: str = ""  # identity key for list diffing
    timestamp_full: str = ""  # full-precision timestamp text

    @property
    def instant(self) -> datetime | None:
        """Parsed timestamp, full precision when available."""
        return parse_instant(self.timestamp_full or self.timestamp)

    def field_value(self, name: str) -> str | None:
        """Return a field by its lower-cased name, or None if there is no such field."""
        getter = _FIELD_GETTERS.get(name)
        return getter(self) if getter is not None else None


_FIELD_GETTERS = {
    "timestamp": lambda r: r.timestamp,
    "protocol": lambda r: r.protocol,
    "hostset": lambda r: r.host_set,
    "domain": lambda r: r.domain,
    "source": lambda r: r.source,
    "ipset": lambda r: r.ip_set,
    "destination": lambda r: r.destination,
    "sourcealias": lambda r: r.source_alias,
    "devicename": lambda r: r.device_name,
    "raw": lambda r: r.raw,
}


class IntelligenceRecord(BaseModel):
    """Descriptive data about a network block (e.g. an autonomous system)."""

    id: str = Field(description="Stable identifier, e.g. an AS number.")
    name: str = Field(description="Human readable label.")
    prefixes: list[str] = Field(default_factory=list, description="CIDR prefixes, IPv4 or IPv6.")
