"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_conn_monitor.core.filtering import GLOBAL_FIELDS, TERM_SEPARATOR
from mcp_conn_monitor.core.models import IntelligenceRecord, SortColumn
from mcp_conn_monitor.core.monitor import ConnectionMonitor

SAMPLE_LOG = (
    "2025/10/13 22:41:12.466126 [INFO],TCP,,assets.example.com,192.168.1.100:38894,,92.123.206.67:443,laptop,\n"
    "2025/10/13 22:41:13.100201 [INFO],UDP,youtube,rr3.googlevideo.com,192.168.1.101:51820,,173.194.1.8:443,,tv\n"
    "2025/10/13 22:41:14.000042 [INFO],TCP,,api.github.com,192.168.1.100:38900,github,140.82.112.6:443,,\n"
    "2025/10/13 22:41:15.310000 [INFO] SNI TCP TARGET: www.youtube.com 192.168.1.102:40001 -> 142.250.74.110:443\n"
)


def register_resources(mcp: FastMCP, monitor: ConnectionMonitor) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://conn-monitor/help")
    def help_resource() -> str:
        """Return a short list of available resources and the filter syntax."""
        columns = ", ".join(c.value for c in SortColumn)
        fields = ", ".join(GLOBAL_FIELDS)
        return (
            "Resources:\n"
            "- app://conn-monitor/help\n"
            "- app://conn-monitor/examples/sample-log\n"
            "- app://conn-monitor/schemas/asn-record\n"
            "- app://conn-monitor/asns\n"
            f"\nFilter: terms joined by '{TERM_SEPARATOR}', e.g. domain:youtube{TERM_SEPARATOR}protocol:tcp\n"
            f"Unscoped terms match any of: {fields}\n"
            f"Sort columns: {columns} (asc|desc|none)\n"
        )

    @mcp.resource("app://conn-monitor/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny sample connection log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://conn-monitor/schemas/asn-record")
    def asn_schema() -> dict[str, Any]:
        """Return the JSON schema for intelligence records."""
        return IntelligenceRecord.model_json_schema()

    @mcp.resource("app://conn-monitor/asns")
    def asns() -> dict[str, Any]:
        """Return all known intelligence records keyed by id."""
        return {rid: rec.model_dump() for rid, rec in monitor.intel.get_all().items()}
