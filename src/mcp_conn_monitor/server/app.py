"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: ingest lines, query the connection view, classify domains/addresses
- Resources: help text, sample log, intelligence schema and records
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_conn_monitor
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_conn_monitor.core.monitor import ConnectionMonitor
from mcp_conn_monitor.prompts.registry import register_prompts
from mcp_conn_monitor.resources.registry import register_resources
from mcp_conn_monitor.tools.monitor import (
    add_asn_impl,
    clear_asns_impl,
    clear_connections_impl,
    dismiss_version_impl,
    domain_variants_impl,
    ingest_file_impl,
    ingest_lines_impl,
    ip_variants_impl,
    list_asns_impl,
    lookup_ip_impl,
    query_connections_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    stdout carries the MCP stdio channel, so logs go to stderr.
    """
    level_name = os.getenv("CONN_MONITOR_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_server(monitor: ConnectionMonitor) -> FastMCP:
    """Create the MCP server bound to one monitoring session."""
    mcp = FastMCP("conn-monitor", json_response=True)

    register_resources(mcp, monitor)
    register_prompts(mcp)

    @mcp.tool()
    def ingest_lines(lines: list[str]) -> dict[str, Any]:
        """Append raw connection-log lines to the bounded stream window."""
        return ingest_lines_impl(monitor, lines=lines)

    @mcp.tool()
    async def ingest_file(log_path: str) -> dict[str, Any]:
        """Append every line of a local connection-log file (plain or .gz)."""
        return await ingest_file_impl(monitor, log_path=log_path)

    @mcp.tool()
    def query_connections(
        query: str = "",
        sort_column: str | None = None,
        sort_direction: str | None = None,
        limit: int | None = None,
        include_raw: bool = False,
        annotate: bool = False,
    ) -> dict[str, Any]:
        """Return recent connections, filtered and sorted.

        Parameters
        ----------
        query:
            Terms joined by '+'. 'field:value' terms are scoped (e.g. domain:youtube,
            protocol:tcp); other terms match domain, source, protocol or destination.
        sort_column/sort_direction:
            One of timestamp, set, protocol, domain, source, destination and
            asc|desc|none. Omit both to reuse the saved preference.
        limit:
            Maximum number of most recent matches (hard-capped in the implementation).
        annotate:
            Attach the known ASN owning each destination address.

        Returns
        -------
        dict:
            {"count": int, "sort": dict, "entries": list[dict]}
        """
        return query_connections_impl(
            monitor,
            query=query,
            sort_column=sort_column,
            sort_direction=sort_direction,
            limit=limit,
            include_raw=include_raw,
            annotate=annotate,
        )

    @mcp.tool()
    def domain_variants(domain: str) -> dict[str, Any]:
        """Candidate block-list patterns for a domain, most specific first."""
        return domain_variants_impl(domain=domain)

    @mcp.tool()
    def ip_variants(address: str) -> dict[str, Any]:
        """Candidate CIDR patterns for an address (port suffix allowed)."""
        return ip_variants_impl(address=address)

    @mcp.tool()
    def add_asn(asn_id: str, name: str, prefixes: list[str]) -> dict[str, Any]:
        """Create or replace an ASN record with its CIDR prefixes."""
        return add_asn_impl(monitor, asn_id=asn_id, name=name, prefixes=prefixes)

    @mcp.tool()
    def lookup_ip(address: str) -> dict[str, Any]:
        """Find the known ASN whose prefixes contain an address."""
        return lookup_ip_impl(monitor, address=address)

    @mcp.tool()
    def list_asns() -> dict[str, Any]:
        """List all known ASN records."""
        return list_asns_impl(monitor)

    @mcp.tool()
    def clear_asns() -> dict[str, Any]:
        """Forget every ASN record and cached lookup."""
        return clear_asns_impl(monitor)

    @mcp.tool()
    def clear_connections() -> dict[str, Any]:
        """Empty the stream window and its persisted copy."""
        return clear_connections_impl(monitor)

    @mcp.tool()
    def dismiss_version(version: str) -> dict[str, Any]:
        """Remember that a release version notice was dismissed."""
        return dismiss_version_impl(monitor, version=version)

    return mcp


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    _ = argv or sys.argv[1:]
    monitor = ConnectionMonitor.from_env()
    restored = monitor.restore()
    LOGGER.info("Restored %d persisted lines (data_dir=%s)", len(restored), monitor.config.data_dir)
    LOGGER.debug("Starting MCP server (transport=stdio)")
    build_server(monitor).run(transport="stdio")


if __name__ == "__main__":
    main()
