"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def classify_connections(query: str = "", limit: int = 50) -> list[dict[str, Any]]:
        """Build a prompt that reviews recent connections and proposes block-list entries."""
        args = f'query="{query}", limit={limit}, annotate=true'
        return [
            {
                "role": "system",
                "content": (
                    "You are a network analyst. Review observed connections and decide which "
                    "domains or address ranges belong on a block-list. Prefer the narrowest "
                    "pattern that covers the traffic. Do not invent connections."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"1) Call query_connections({args}).\n"
                    "2) For each domain without a host_set, call domain_variants and pick one.\n"
                    "3) For each destination without an ip_set or asn, call ip_variants and pick one.\n"
                    "4) Reply with a table: pattern, kind (domain|cidr), reason."
                ),
            },
        ]
