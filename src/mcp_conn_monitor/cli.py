from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from mcp_conn_monitor.core.config import MonitorConfig
from mcp_conn_monitor.core.monitor import ConnectionMonitor
from mcp_conn_monitor.core.sorting import SortSpec, parse_sort


def _parse_sort_arg(s: str) -> SortSpec:
    column, _, direction = s.partition(":")
    try:
        return parse_sort(column, direction or None)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError("must be an integer") from e
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Filter and sort a connection log (SNI/flow lines).")
    p.add_argument("log_path")
    p.add_argument("--filter", dest="query", default="", help="e.g. 'domain:youtube+protocol:tcp'")
    p.add_argument(
        "--sort",
        type=_parse_sort_arg,
        default=SortSpec(),
        help="COLUMN[:asc|desc|none], e.g. timestamp:desc",
    )
    p.add_argument("--limit", type=_positive_int, default=None, help="Keep the N most recent matches")
    p.add_argument("--capacity", type=_positive_int, default=1000, help="Stream window size")
    p.add_argument("--asn-dir", default=None, help="Data directory holding saved ASN records")
    p.add_argument("--raw", action="store_true", help="Print the raw line instead of the parsed fields")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    path = Path(args.log_path)

    cfg = MonitorConfig(
        data_dir=Path(args.asn_dir) if args.asn_dir else None,
        buffer_capacity=args.capacity,
    )
    monitor = ConnectionMonitor(cfg)
    # the window is rebuilt from the file, never from a previous run
    monitor.buffer.autosave = False

    try:
        asyncio.run(monitor.ingest_file(path))
        records = monitor.view(args.query, args.sort.column, args.sort.direction, limit=args.limit)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    annotate = args.asn_dir is not None
    for r in records:
        if args.raw:
            print(r.raw)
            continue
        line = f"{r.timestamp} {r.protocol} {r.domain or '-'} {r.source} -> {r.destination}"
        tags = [t for t in (r.host_set, r.ip_set) if t]
        if annotate:
            asn = monitor.annotate(r)
            if asn is not None:
                tags.append(f"AS{asn.id} {asn.name}" if asn.id.isdigit() else f"{asn.id} {asn.name}")
        if tags:
            line += f" [{', '.join(tags)}]"
        print(line)

    print(f"\nFound {len(records)} matching connections.")


if __name__ == "__main__":
    main()
