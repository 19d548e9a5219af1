"""Module entrypoint.

Allows:
    python -m mcp_conn_monitor
"""

from __future__ import annotations

from mcp_conn_monitor.server.app import main

if __name__ == "__main__":
    main()
