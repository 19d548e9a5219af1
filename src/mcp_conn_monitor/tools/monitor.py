"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp_conn_monitor.core.intel_cache import parse_prefix
from mcp_conn_monitor.core.models import ConnectionRecord, IntelligenceRecord
from mcp_conn_monitor.core.monitor import ConnectionMonitor
from mcp_conn_monitor.core.preferences import dismiss_version
from mcp_conn_monitor.core.sorting import parse_sort
from mcp_conn_monitor.core.variants import domain_variants, ip_variants, strip_port

DEFAULT_LIMIT = 200
HARD_LIMIT = 1000


def _record_to_dict(
    record: ConnectionRecord,
    *,
    include_raw: bool,
    asn: IntelligenceRecord | None = None,
    annotated: bool = False,
) -> dict[str, Any]:
    """Convert a ConnectionRecord into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "timestamp": record.timestamp,
        "protocol": record.protocol,
        "host_set": record.host_set,
        "domain": record.domain,
        "source": record.source,
        "ip_set": record.ip_set,
        "destination": record.destination,
    }
    if record.source_alias:
        d["source_alias"] = record.source_alias
    if record.device_name:
        d["device_name"] = record.device_name
    if annotated:
        d["asn"] = asn.model_dump() if asn is not None else None
    if include_raw:
        d["raw"] = record.raw
    return d


def ingest_lines_impl(monitor: ConnectionMonitor, *, lines: Sequence[str]) -> dict[str, Any]:
    """Push raw lines into the stream window."""
    accepted = monitor.ingest(lines)
    return {"accepted": accepted, "retained": len(monitor.buffer), "paused": monitor.paused}


async def ingest_file_impl(monitor: ConnectionMonitor, *, log_path: str) -> dict[str, Any]:
    """Push every line of a connection-log file into the stream window."""
    accepted = await monitor.ingest_file(log_path)
    return {"accepted": accepted, "retained": len(monitor.buffer)}


def query_connections_impl(
    monitor: ConnectionMonitor,
    *,
    query: str = "",
    sort_column: str | None = None,
    sort_direction: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
    annotate: bool = False,
) -> dict[str, Any]:
    """Implementation for the `query_connections` MCP tool.

    Notes
    -----
    - When neither sort_column nor sort_direction is given the saved sort
      preference is used; otherwise the requested sort is applied and saved.
    - limit keeps the most recent matches (capped at HARD_LIMIT).
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if limit > HARD_LIMIT:
        limit = HARD_LIMIT

    if sort_column is None and sort_direction is None:
        spec = monitor.sort_state
    else:
        spec = parse_sort(sort_column, sort_direction)
        monitor.sort_state = spec

    records = monitor.view(query, spec.column, spec.direction, limit=limit)
    entries = [
        _record_to_dict(
            r,
            include_raw=include_raw,
            asn=monitor.annotate(r) if annotate else None,
            annotated=annotate,
        )
        for r in records
    ]
    return {
        "count": len(entries),
        "sort": {
            "column": spec.column.value if spec.column is not None else None,
            "direction": spec.direction.value,
        },
        "entries": entries,
    }


def domain_variants_impl(*, domain: str) -> dict[str, Any]:
    domain = domain.strip().lower()
    return {"domain": domain, "variants": domain_variants(domain)}


def ip_variants_impl(*, address: str) -> dict[str, Any]:
    return {"address": strip_port(address), "variants": ip_variants(address)}


def add_asn_impl(
    monitor: ConnectionMonitor,
    *,
    asn_id: str,
    name: str,
    prefixes: Sequence[str],
) -> dict[str, Any]:
    """Upsert an intelligence record. Malformed prefixes are stored but reported."""
    asn_id = asn_id.strip()
    if not asn_id:
        raise ValueError("asn_id must not be empty")
    cleaned = [p.strip() for p in prefixes if p.strip()]
    record = monitor.intel.add(asn_id, name.strip(), cleaned)
    invalid = [p for p in cleaned if parse_prefix(p) is None]
    return {"asn": record.model_dump(), "invalid_prefixes": invalid}


def lookup_ip_impl(monitor: ConnectionMonitor, *, address: str) -> dict[str, Any]:
    record = monitor.intel.find_containing(address)
    return {
        "address": strip_port(address),
        "asn": record.model_dump() if record is not None else None,
        "variants": ip_variants(address),
    }


def list_asns_impl(monitor: ConnectionMonitor) -> dict[str, Any]:
    records = monitor.intel.get_all()
    return {"count": len(records), "asns": [r.model_dump() for r in records.values()]}


def clear_asns_impl(monitor: ConnectionMonitor) -> dict[str, Any]:
    monitor.intel.clear()
    return {"cleared": True}


def clear_connections_impl(monitor: ConnectionMonitor) -> dict[str, Any]:
    monitor.clear()
    return {"cleared": True}


def dismiss_version_impl(monitor: ConnectionMonitor, *, version: str) -> dict[str, Any]:
    version = version.strip()
    if not version:
        raise ValueError("version must not be empty")
    return {"dismissed": dismiss_version(monitor.store, version)}
